"""ResponseWriter: saves query results to Markdown files on disk."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from thinktank.config.models import DEFAULT_GROUP
from thinktank.errors.base import FileSystemError
from thinktank.workflow import QueryResult

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _sanitize_filename(name: str) -> str:
    """Make *name* safe to use as a single path component."""
    name = name.replace("/", "--").replace(":", "-")
    name = name.replace("..", "")
    name = re.sub(r"[^\w\-\.@]", "", name)
    if not name or name.strip(".") == "":
        name = "_unnamed"
    return name


def _strip_control_chars(text: str) -> str:
    # Tabs and newlines survive.
    return _CONTROL_CHARS.sub("", text)


def _group_name(result: QueryResult, group: str | None) -> str:
    if result.response is not None and result.response.group_info is not None:
        return result.response.group_info.name
    return group or DEFAULT_GROUP


def result_filename(result: QueryResult, group: str | None = None) -> str:
    """``{group}-{provider}-{modelId}.md``, without the group part for the default group."""
    provider, _, model_id = result.model_key.partition(":")
    name = f"{provider}-{model_id}"
    group_name = _group_name(result, group)
    if group_name != DEFAULT_GROUP:
        name = f"{group_name}-{name}"
    return f"{_sanitize_filename(name)}.md"


def format_result_as_markdown(
    result: QueryResult,
    include_metadata: bool = False,
    group: str | None = None,
) -> str:
    group_name = _group_name(result, group)
    header = f"# {result.model_key}"
    if group_name != DEFAULT_GROUP:
        header += f" ({group_name} group)"

    lines = [header, "", f"Generated: {datetime.now(timezone.utc).isoformat()}", ""]

    response = result.response
    if response is not None and response.group_info is not None:
        lines.append(f"Group: {response.group_info.name}")
        if include_metadata:
            lines.append(f'System Prompt: "{response.group_info.system_prompt.text}"')
        lines.append("")

    if result.error is not None:
        lines += ["## Error", "", "```", _strip_control_chars(result.error.format()), "```", ""]
    else:
        lines += ["## Response", "", _strip_control_chars(response.text), ""]
        if include_metadata and response.metadata:
            lines += [
                "## Metadata",
                "",
                "```json",
                json.dumps(response.metadata, indent=2, default=str),
                "```",
                "",
            ]

    return "\n".join(lines)


class ResponseWriter:
    """Writes one Markdown file per query result into ``output_dir``.

    Failed results are written too, with an Error section in place of the
    response, so a run's output directory mirrors what was shown on screen.
    """

    def __init__(
        self,
        output_dir: str | Path,
        include_metadata: bool = False,
        group: str | None = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.include_metadata = include_metadata
        self.group = group

    def write(self, result: QueryResult) -> Path:
        dest = self.output_dir / result_filename(result, self.group)
        content = format_result_as_markdown(result, self.include_metadata, self.group)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_text(content, encoding="utf-8")
        except OSError as e:
            raise FileSystemError(
                f"Could not write output file {dest}: {e}",
                file_path=str(dest),
                cause=e,
                suggestions=[
                    "Check that the output directory is writable",
                    "Or choose another directory with --output",
                ],
            ) from e
        logger.info("wrote %s (%d bytes)", dest, len(content))
        return dest

    def write_batch(self, results: list[QueryResult]) -> list[Path]:
        """Write every result. Returns paths in input order."""
        return [self.write(result) for result in results]
