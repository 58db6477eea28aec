"""Command-line surface: parser, dispatcher and the non-interactive runners."""
