"""LaunchPad: aggregate hackathon, internship and coding-contest listings."""

__version__ = "0.1.0"
