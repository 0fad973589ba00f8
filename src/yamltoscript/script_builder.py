# script_builder.py
from __future__ import annotations

import os
import shlex
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from .ui.console import colorize

INTERPRETER = "#!/bin/bash"
WRAPPER = "CallWrapper"
PRINTER = "SummaryPrinter"
SUMMARIES = "commandSummaries"

# Entries are "<label>|<timing>"; the printer pads between the two halves.
# Colour codes are stripped before measuring so coloured labels line up.
SUMMARY_PRINTER = r"""
commandSummaries=()

SummaryPrinter()
{
	local header=" Summary "
	local width=100
	local entry plain label timing plainLabel plainTiming padding
	for entry in "${commandSummaries[@]}"; do
		plain=$(sed 's/\x1b\[[0-9;]*m//g' <<< "$entry")
		if [ ${#plain} -gt $width ]; then
			width=${#plain}
		fi
	done
	if [ $(( (width - ${#header}) % 2 )) -eq 1 ]; then
		width=$((width + 1))
	fi
	local rule=$(( (width - ${#header}) / 2 ))
	echo ""
	printf '=%.0s' $(seq 1 $rule)
	printf '%s' "$header"
	printf '=%.0s' $(seq 1 $rule)
	echo ""
	for entry in "${commandSummaries[@]}"; do
		plain=$(sed 's/\x1b\[[0-9;]*m//g' <<< "$entry")
		label=${entry%|*}
		timing=${entry##*|}
		plainLabel=${plain%|*}
		plainTiming=${plain##*|}
		padding=$((width - ${#plainLabel} - ${#plainTiming}))
		printf '%s' "$label"
		if [ $padding -gt 0 ]; then
			printf ' %.0s' $(seq 1 $padding)
		fi
		printf '%s\n' "$timing"
	done
	exit $1
}
"""


@dataclass(frozen=True)
class ScriptOptions:
    echo: bool = True
    error_check: bool = True
    summary: bool = True


class ScriptBuilder:
    """
    Append-only buffer for the generated shell script.

    Construction emits the interpreter line, the summary machinery (if
    enabled) and the CallWrapper function. Every accepted command becomes
    one CallWrapper invocation. write() closes the script and puts it on disk.
    """

    def __init__(self, options: ScriptOptions | None = None):
        self.options = options or ScriptOptions()
        self._lines: List[str] = []
        self._commands: List[Tuple[str, str]] = []
        self._finalized = False

        self.add_line(INTERPRETER)
        if self.options.summary:
            self.add_line(SUMMARY_PRINTER)
        self._add_call_wrapper()

    # -----------------------------------------------------------------
    # Buffer primitives
    # -----------------------------------------------------------------

    @property
    def lines(self) -> Tuple[str, ...]:
        return tuple(self._lines)

    @property
    def commands(self) -> List[Tuple[str, str]]:
        """(display name, command) pairs in emission order."""
        return list(self._commands)

    def add_line(self, line: str) -> None:
        if self._finalized:
            raise RuntimeError("Script already finalized")
        self._lines.append(line)

    def add_comment(self, comment: str) -> None:
        # keep multi-line names on one comment line
        self.add_line("# " + " ".join(comment.splitlines()))

    def render(self) -> str:
        return "\n".join(self._lines) + "\n"

    # -----------------------------------------------------------------
    # Generated runtime
    # -----------------------------------------------------------------

    def _summary_entry(self, label: str, indent: str = "") -> str:
        return f'\t{indent}{SUMMARIES}+=( "{label}|$startTimePretty - $endTimePretty  $elapsed" )'

    def _add_call_wrapper(self) -> None:
        opts = self.options
        self.add_line(f"{WRAPPER}()")
        self.add_line("{")
        self.add_line("\tlocal exitCode")

        if opts.summary:
            self.add_line('\tlocal startTime=$(date +"%s")')
            self.add_line('\tlocal startTimePretty=$(date +"%b %d %T")')
            start = colorize("$1 : START $startTimePretty", "magenta")
            self.add_line(f'\techo -e "{start}"')

        if opts.echo:
            self.add_line('\techo "$2"')

        self.add_line('\teval "$2"')
        self.add_line("\texitCode=$?")

        if opts.summary:
            self.add_line('\tlocal endTime=$(date +"%s")')
            self.add_line('\tlocal endTimePretty=$(date +"%b %d %T")')
            self.add_line("\tlocal duration=$((endTime - startTime))")
            self.add_line("\tlocal elapsed=$(date -d @$duration -u +%M:%S)")
            end = colorize("$1 : END $endTimePretty - $elapsed", "magenta")
            self.add_line(f'\techo -e "{end}"')

        self.add_line('\techo ""')

        if opts.error_check:
            self.add_line("\tif [ $exitCode -ne 0 ]; then")
            message = colorize(
                "$2\\nfailed with error code $exitCode. Stopping execution early.", "red"
            )
            self.add_line(f'\t\techo -e "{message}"')
            if opts.summary:
                self.add_line(self._summary_entry(colorize("$1 : Failed", "red"), "\t"))
                self.add_line(f"\t\t{PRINTER} $exitCode")
            else:
                self.add_line("\t\texit $exitCode")
            self.add_line("\tfi")
            if opts.summary:
                self.add_line(self._summary_entry("$1"))
        elif opts.summary:
            # no abort, but the summary still shows which commands failed
            self.add_line("\tif [ $exitCode -ne 0 ]; then")
            self.add_line(self._summary_entry(colorize("$1 : Failed ($exitCode)", "red"), "\t"))
            self.add_line("\telse")
            self.add_line(self._summary_entry("$1", "\t"))
            self.add_line("\tfi")

        self.add_line("}")
        self.add_line("")

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def add_job(self, name: str) -> None:
        self.add_comment(f"Job: {name}")
        self.add_line("")

    def add_command(self, display_name: str, command: str) -> None:
        self.add_comment(display_name)
        self.add_line(f"{WRAPPER} {shlex.quote(display_name)} {shlex.quote(command)}")
        self.add_line("")
        self._commands.append((display_name, command))

    def finalize(self) -> None:
        if self._finalized:
            return
        if self.options.summary:
            self.add_line(f"{PRINTER} 0")
        else:
            self.add_line("exit 0")
        self._finalized = True

    def write(self, path: str | Path) -> Path:
        """Finalize, write the script and set the owner's executable bit."""
        self.finalize()
        out = Path(path)
        out.write_text(self.render(), encoding="utf-8")
        mode = os.stat(out).st_mode
        os.chmod(out, mode | stat.S_IXUSR)
        return out
