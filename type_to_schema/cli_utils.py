"""
CLI utilities for command line reconstruction and diagnostics output.
"""

from pathlib import Path

import click

from .pipeline.errors import Diagnostic, DiagnosticLevel

PROGRAM_NAME = "type_to_schema"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    # Try to get current Click context for parameter values
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        # No active context, return basic command
        return PROGRAM_NAME

    if not cli_args:
        return PROGRAM_NAME

    arguments = []  # For positional arguments
    options = []  # For optional arguments

    for param in click_command.params:
        value = cli_args.get(param.name)
        if not value:
            continue

        # Show file paths as file names
        if isinstance(value, (str, Path)):
            path_obj = Path(str(value))
            formatted_value = path_obj.name if path_obj.exists() else str(value)
        else:
            formatted_value = str(value)

        if isinstance(param, click.Argument):
            arguments.append(formatted_value)

        elif isinstance(param, click.Option):
            # Skip if it's the default value
            if value == param.default:
                continue

            flag = param.opts[0] if param.opts else f"--{param.name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, formatted_value])

    return " ".join([PROGRAM_NAME, *arguments, *options])


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """Format a diagnostic for terminal output, colored by level."""
    colors = {
        DiagnosticLevel.ERROR: "red",
        DiagnosticLevel.WARNING: "yellow",
        DiagnosticLevel.INFO: None,
    }
    return click.style(str(diagnostic), fg=colors[diagnostic.level])
