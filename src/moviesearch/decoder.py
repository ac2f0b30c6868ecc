"""
Overview decoder — best-effort extraction of overview text and per-movie
explanations from a possibly malformed generator payload.

Fallback chain:
- fence stripping (```json ... ```)
- structural parse, retried after each repair rule alone, then all combined
- text salvage of the "overview" field
- empty overview

decode() never raises: once a payload reaches this stage the caller has no
fallback of its own.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from moviesearch.models.overview import (
    AIMetadata,
    DecodeStatus,
    Overview,
    OverviewDocument,
    OverviewMetadata,
)

logger = logging.getLogger("moviesearch.decoder")

_LEADING_FENCE = re.compile(r"^```(?:json)?", re.IGNORECASE)
_TRAILING_FENCE = "```"
_OVERVIEW_FIELD = re.compile(r'"overview"\s*:\s*"([^"]+)"')


@dataclass(frozen=True)
class RepairRule:
    """A regex rewrite for one known generator defect."""

    name: str
    pattern: re.Pattern[str]
    replacement: Union[str, Callable[[re.Match[str]], str]]

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


# "overview": "..." followed by a newline and "movie_explanations" without a comma
MISSING_COMMA_AFTER_OVERVIEW = RepairRule(
    name="missing_comma_after_overview",
    pattern=re.compile(r'("overview"\s*:\s*"[^"]*")[ \t\r]*\n\s*("movie_explanations")'),
    replacement=r"\1,\n  \2",
)

# a comma directly before } or ], skipping over quoted string values
TRAILING_COMMA = RepairRule(
    name="trailing_comma",
    pattern=re.compile(r'("(?:[^"\\]|\\.)*")|,(\s*[}\]])'),
    replacement=lambda m: m.group(1) if m.group(1) is not None else m.group(2),
)

DEFAULT_REPAIRS: tuple[RepairRule, ...] = (MISSING_COMMA_AFTER_OVERVIEW, TRAILING_COMMA)


def strip_fences(raw: str) -> str:
    """Strip one leading and one trailing markdown code fence."""
    content = raw.strip()
    match = _LEADING_FENCE.match(content)
    if match:
        content = content[match.end():]
    if content.endswith(_TRAILING_FENCE):
        content = content[: -len(_TRAILING_FENCE)]
    return content.strip()


class OverviewDecoder:
    def __init__(self, repairs: tuple[RepairRule, ...] = DEFAULT_REPAIRS):
        self._repairs = tuple(repairs)

    @property
    def repairs(self) -> tuple[RepairRule, ...]:
        return self._repairs

    def decode(self, raw: Optional[str]) -> Overview:
        try:
            return self._decode(raw or "", nested=False)
        except (ValueError, TypeError, RecursionError) as e:
            logger.warning(f"Overview decode failed unexpectedly: {e}")
            return _empty()

    def _decode(self, raw: str, nested: bool) -> Overview:
        content = strip_fences(raw)
        if not content:
            return _empty()

        document, applied = self._parse(content)
        if document is not None:
            if applied:
                logger.warning(f"Overview payload repaired: {', '.join(applied)}")
            return self._from_document(document, repaired=bool(applied), nested=nested)

        salvaged = _OVERVIEW_FIELD.search(content)
        if salvaged:
            logger.warning("Overview payload unparseable, salvaged overview text only")
            return Overview(
                summary_text=salvaged.group(1),
                metadata=OverviewMetadata(decode_status=DecodeStatus.REPAIRED),
            )

        logger.warning("Overview payload unparseable, nothing salvaged")
        return _empty()

    def _parse(self, content: str) -> tuple[Optional[OverviewDocument], list[str]]:
        """Parse as-is, then with each repair rule alone, then with all of them combined."""
        document = _load_document(content)
        if document is not None:
            return document, []

        changed = False
        for rule in self._repairs:
            candidate = rule.apply(content)
            if candidate == content:
                continue
            changed = True
            document = _load_document(candidate)
            if document is not None:
                return document, [rule.name]
        if not changed:
            return None, []

        applied: list[str] = []
        repaired = content
        for rule in self._repairs:
            candidate = rule.apply(repaired)
            if candidate != repaired:
                applied.append(rule.name)
                repaired = candidate
        document = _load_document(repaired)
        return (document, applied) if document is not None else (None, [])

    def _from_document(self, document: OverviewDocument, repaired: bool, nested: bool) -> Overview:
        meta = document.ai_metadata
        status = DecodeStatus.REPAIRED if repaired else DecodeStatus.OK
        summary = document.overview
        explanations = document.movie_explanations

        if meta is not None and not nested:
            if meta.status == "parse_error" and summary:
                # The service could not parse the generator output and passed it through raw.
                inner = self._decode(summary, nested=True)
                if inner.decode_status == DecodeStatus.EMPTY:
                    summary = ""
                    status = DecodeStatus.REPAIRED if explanations else DecodeStatus.EMPTY
                else:
                    summary = inner.summary_text
                    explanations = inner.explanations or explanations
                    status = DecodeStatus.REPAIRED
            elif meta.status == "error":
                status = DecodeStatus.ERROR
            elif meta.status == "no_results" and not summary and not explanations:
                status = DecodeStatus.EMPTY

        return Overview(
            summary_text=summary,
            explanations=explanations,
            metadata=_metadata(status, meta),
        )


def _load_document(content: str) -> Optional[OverviewDocument]:
    try:
        data: Any = json.loads(content)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return OverviewDocument.model_validate(data)
    except ValidationError:
        return None


def _metadata(status: DecodeStatus, meta: Optional[AIMetadata]) -> OverviewMetadata:
    if meta is None:
        return OverviewMetadata(decode_status=status)
    return OverviewMetadata(
        decode_status=status,
        model=meta.model,
        generation_time_ms=meta.generation_time_ms,
        eval_count=meta.eval_count,
        prompt_eval_count=meta.prompt_eval_count,
        error=meta.error,
    )


def _empty() -> Overview:
    return Overview(metadata=OverviewMetadata(decode_status=DecodeStatus.EMPTY))
