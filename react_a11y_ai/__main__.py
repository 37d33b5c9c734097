from react_a11y_ai.cli import cli

cli(prog_name="react-a11y-ai")
