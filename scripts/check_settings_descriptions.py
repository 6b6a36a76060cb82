"""Fail CI if Settings fields are missing good descriptions.

Checks all Pydantic BaseModel fields reachable from Settings for:
- Non-empty description
- Minimum description length (configurable)

Exit code 1 when violations are found.
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, Sequence

from pydantic import BaseModel

from rotalog.core.settings import Settings


def iter_models(model: BaseModel) -> Iterable[BaseModel]:
    yield model
    for field_name in type(model).model_fields:
        value = getattr(model, field_name, None)
        if isinstance(value, BaseModel):
            yield from iter_models(value)


def find_missing_descriptions(model: BaseModel, min_length: int) -> list[str]:
    failures: list[str] = []
    for m in iter_models(model):
        model_name = type(m).__name__
        for field_name, field in type(m).model_fields.items():
            desc = field.description or ""
            if len(desc.strip()) < min_length:
                failures.append(f"{model_name}.{field_name}: missing/short description")
    return failures


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--min-length", type=int, default=15)
    args = parser.parse_args(argv)

    failures = find_missing_descriptions(Settings(), args.min_length)
    if failures:
        print(
            "Missing or too-short descriptions (set via Field(..., description=...)):"
        )
        for f in failures:
            print(f" - {f}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
