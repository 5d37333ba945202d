"""Test case step scripts.

Converts a line-oriented step script such as::

    1. Open the login page|Login form appears
    2. Enter credentials

into the XML stored in the ``Microsoft.VSTS.TCM.Steps`` field of a test case.
Ordinals are optional and discarded; the step index in the output is the
running position of the line.
"""
import re
from typing import NamedTuple
from xml.sax.saxutils import escape

DEFAULT_EXPECTED_RESULT = "Verify step completes successfully"

_ORDINAL_PATTERN = re.compile(r"^\d+\.\s*(.+)$")

# escape() handles &, < and > itself, with & first
_QUOTE_ENTITIES = {"'": "&apos;", '"': "&quot;"}


class ParsedStep(NamedTuple):
    action: str
    expected: str


def escape_xml(text: str) -> str:
    """Escape the five XML special characters."""
    return escape(text, _QUOTE_ENTITIES)


def parse_steps(script: str) -> list[ParsedStep]:
    """Split a step script into (action, expected result) pairs.

    Blank lines are skipped. Text after the first ``|`` is the expected
    result; a line without ``|`` gets ``DEFAULT_EXPECTED_RESULT``, while an
    explicit empty expected result is kept empty.
    """
    steps = []
    for line in script.split("\n"):
        line = line.strip()
        if not line:
            continue

        action, separator, expected = line.partition("|")
        action = action.strip()
        match = _ORDINAL_PATTERN.match(action)
        if match:
            action = match.group(1)

        steps.append(ParsedStep(
            action=action,
            expected=expected.strip() if separator else DEFAULT_EXPECTED_RESULT,
        ))
    return steps


def convert_steps_to_xml(script: str) -> str:
    """Compile a step script to test case steps XML.

    An empty script yields an empty ``<steps>`` container with ``last="0"``.
    """
    steps = parse_steps(script)

    parts = [f'<steps id="0" last="{len(steps)}">']
    for index, step in enumerate(steps, start=1):
        parts.append(
            f'<step id="{index}" type="ActionStep">'
            f'<parameterizedString isformatted="true">{escape_xml(step.action)}</parameterizedString>'
            f'<parameterizedString isformatted="true">{escape_xml(step.expected)}</parameterizedString>'
            f'</step>'
        )
    parts.append("</steps>")
    return "".join(parts)
