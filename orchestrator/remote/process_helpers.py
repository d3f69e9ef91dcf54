"""Shell snippets for managing benchmark processes on a remote host.

Each helper returns POSIX shell text meant to be used as a step of a
``RemoteScript``. Process patterns are turned into a regex whose first
character is bracketed (``[E]choServer``): it still matches the target
command line, but not the command line of the remote shell running the
snippet, so ``pgrep``/``pkill`` never select the helper itself.
"""

from __future__ import annotations

import re
import shlex

# Characters with special meaning in the extended regexes used by pgrep/pkill.
_ERE_SPECIAL = re.compile(r"([.^$*+?()\[\]{}|\\])")


def _escape_ere(text: str) -> str:
    return _ERE_SPECIAL.sub(r"\\\1", text)


def self_excluding_pattern(pattern: str) -> str:
    """Regex matching ``pattern`` literally, but not its own source text.

    The first word character is the one bracketed, so patterns starting with
    ``]``, ``^``, ``\\`` or ``-`` are still excluded from their own match.
    """
    match = re.search(r"\w", pattern)
    if match is None:
        raise ValueError(f"Process pattern needs at least one word character: {pattern!r}")
    i = match.start()
    return _escape_ere(pattern[:i]) + f"[{pattern[i]}]" + _escape_ere(pattern[i + 1:])


def _awk_literal(text: str) -> str:
    """Escape ``text`` for use inside an awk ``/regex/``."""
    return _escape_ere(text).replace("/", "\\/")


def find_process(pattern: str, runtime: str = "java") -> str:
    """Expression printing the first pid whose command line matches ``pattern``.

    Only processes whose name matches ``runtime`` are considered.
    """
    regex = shlex.quote(self_excluding_pattern(pattern))
    awk_program = shlex.quote(f"/{_awk_literal(runtime)}/{{print $1}}")
    return f"pgrep -l -f -- {regex} | awk {awk_program} | head -1"


def await_process_start(pid_expression: str, poll_interval: float = 0.5) -> str:
    """Poll ``pid_expression`` until it yields a pid, then report it.

    The pid is left in the shell variable ``pid``. There is no upper bound on
    the wait.
    """
    return (
        f'pid=$({pid_expression}); '
        f'while [ -z "${{pid}}" ]; do sleep {poll_interval}; pid=$({pid_expression}); done; '
        f'echo "pid=\'${{pid}}\'"'
    )


def pin_thread(pid: str, thread_name: str, cpu_core: int, poll_interval: float = 0.1) -> str:
    """Pin the first thread of ``pid`` whose name contains ``thread_name`` to ``cpu_core``.

    ``pid`` may be a literal id or a shell expansion such as ``${pid}``.
    """
    awk_program = shlex.quote(f"/{_awk_literal(thread_name)}/{{print $1}}")
    lookup = f'ps Ho tid,comm -p "{pid}" | awk {awk_program} | head -1'
    return (
        f"tid=''; "
        f'while [ -z "${{tid}}" ]; do sleep {poll_interval}; tid=$({lookup}); done; '
        f'taskset -p -c {int(cpu_core)} "${{tid}}"'
    )


def kill_process(pattern: str) -> str:
    """Force-terminate every process whose command line matches ``pattern``.

    Succeeds when nothing matches.
    """
    return f"pkill -9 -f -- {shlex.quote(self_excluding_pattern(pattern))} || true"
