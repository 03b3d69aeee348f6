#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Loading of plain Python data structures from files"""

import ast
import errno
from pathlib import Path
from typing import Any

from printq.utils.exceptions import MKGeneralException


# Handle .mk files that are only holding a python data structure and often
# directly read via file/open and then parsed using eval.
def load_object_from_file(path: Path | str, default: Any = None) -> Any:
    content = load_text_from_file(path)
    if not content.strip():
        return default
    try:
        return ast.literal_eval(content)
    except (SyntaxError, ValueError) as e:
        raise MKGeneralException(f'Cannot parse file "{path}": {e}') from e


def load_text_from_file(path: Path | str, default: str = "") -> str:
    if not isinstance(path, Path):
        path = Path(path)

    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        if e.errno == errno.ENOENT:  # No such file or directory
            return default
        raise MKGeneralException(f'Cannot read file "{path}": {e}') from e
