"""Local file resolution for runnable files and resources."""
