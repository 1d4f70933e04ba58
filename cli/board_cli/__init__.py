"""widgetboard CLI: location management and a terminal viewer."""

__version__ = "0.1.0"
