"""logrelay core - context, colors, emitter, bridge and lifecycle."""
