"""ESLint jsx-a11y checks with AI-suggested quick fixes for React projects."""

__version__ = "0.1.0"
