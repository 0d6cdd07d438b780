"""logrelay routing - fans formatted lines out to configured sinks.

Sinks are the closed set of terminal, file and HTTP webhook targets,
all behind the ``BaseSink`` protocol.  ``SinkFanout`` writes each line
to every sink whose threshold admits its level, isolating failures per
sink.
"""
