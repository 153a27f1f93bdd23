"""
Batch linking job: load two scraped listing files, link them, write outputs.

Inputs are JSON arrays of listing objects, one file per source. Outputs:

    matched_laptops      entries sold by both sources
    <a>_only_laptops     source-A listings with no partner
    <b>_only_laptops     source-B listings with no partner
    final_laptops        all of the above, in that order

written either as four JSON files (UTF-8, indent 2) or as one Excel
workbook with one sheet per set.
"""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from loguru import logger

from laptop_linker.exceptions import InputError
from laptop_linker.linker import (
    STATUS_A_ONLY, STATUS_B_ONLY, STATUS_MATCHED,
    LinkResult, check_source_names, compute_link_metrics, link_sources,
)
from laptop_linker.records import RawRecord
from laptop_linker.settings import get_settings
from laptop_linker.vocabulary import Vocabulary, load_vocabulary

EXPORT_FORMATS = ('json', 'xlsx')
WORKBOOK_NAME = 'linked_laptops.xlsx'
EXCEL_SHEET_NAME_LIMIT = 31

PathLike = Union[str, Path]


def output_names(result: LinkResult) -> Dict[str, str]:
    """Output set -> file stem."""
    return {
        'matched': 'matched_laptops',
        'a_only': f'{result.source_a}_only_laptops',
        'b_only': f'{result.source_b}_only_laptops',
        'final': 'final_laptops',
    }


def load_raw_records(
    path: PathLike,
    source: str,
    vocabulary: Optional[Vocabulary] = None,
) -> List[RawRecord]:
    """
    Read a source's scraped listings.

    Raises InputError when the file is missing or unreadable, is not UTF-8
    JSON, or is not an array of objects. Individual listings are never rejected.
    """
    path = Path(path)
    vocab = vocabulary or load_vocabulary()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise InputError(f"Input file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise InputError(f"Input file is not valid JSON: {path} ({e})") from e
    except UnicodeDecodeError as e:
        raise InputError(f"Input file is not UTF-8 text: {path} ({e})") from e
    except OSError as e:
        raise InputError(f"Cannot read input file: {path} ({e})") from e

    if not isinstance(data, list):
        raise InputError(f"Input file must contain a JSON array: {path}")
    if not all(isinstance(item, dict) for item in data):
        raise InputError(f"Input array must contain only objects: {path}")

    records = [RawRecord.from_mapping(item, source, vocab) for item in data]
    logger.info(f"Loaded {len(records)} {source} listings from {path}")
    return records


def _entries_by_set(result: LinkResult) -> Dict[str, List[Dict[str, Any]]]:
    matched = [e.to_dict() for e in result.matched]
    a_only = [e.to_dict() for e in result.a_only]
    b_only = [e.to_dict() for e in result.b_only]
    return {
        'matched': matched,
        'a_only': a_only,
        'b_only': b_only,
        'final': matched + a_only + b_only,
    }


def export_link_result(result: LinkResult, out_dir: PathLike, fmt: str = 'json') -> List[Path]:
    """
    Write the four output sets to ``out_dir``.

    Returns the list of files written.
    """
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}', expected one of {EXPORT_FORMATS}")

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    names = output_names(result)
    written: List[Path] = []

    if fmt == 'json':
        for set_name, entries in _entries_by_set(result).items():
            path = out_dir / f"{names[set_name]}.json"
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(entries, f, indent=2, ensure_ascii=False)
            written.append(path)
            logger.info(f"Wrote {path} ({len(entries)} entries)")
        return written

    # One workbook, one sheet per set; the final sheet carries the status column
    frame = result.to_frame()
    status_by_set = {
        'matched': STATUS_MATCHED,
        'a_only': STATUS_A_ONLY,
        'b_only': STATUS_B_ONLY,
    }
    path = out_dir / WORKBOOK_NAME
    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        for set_name, stem in names.items():
            if set_name == 'final':
                sheet = frame
            else:
                sheet = frame[frame['status'] == status_by_set[set_name]].drop(columns=['status'])
            sheet.to_excel(writer, sheet_name=stem[:EXCEL_SHEET_NAME_LIMIT], index=False)
    written.append(path)
    logger.info(f"Wrote {path} ({len(frame)} rows)")
    return written


def run_linking_job(
    path_a: PathLike,
    path_b: PathLike,
    source_a: str = 'amazon',
    source_b: str = 'flipkart',
    out_dir: Optional[PathLike] = None,
    fmt: str = 'json',
    vocabulary: Optional[Vocabulary] = None,
) -> Dict[str, Any]:
    """
    Load -> link -> export -> metrics.

    Returns:
        dict with 'result' (LinkResult), 'files' (written paths),
        'metrics' (compute_link_metrics output) and 'elapsed_s'.

    Raises ValueError when the two source names are equal, before any file
    is read.
    """
    check_source_names(source_a, source_b)
    start = time.perf_counter()
    vocab = vocabulary or load_vocabulary()
    if out_dir is None:
        out_dir = get_settings().output_dir

    raw_a = load_raw_records(path_a, source_a, vocab)
    raw_b = load_raw_records(path_b, source_b, vocab)
    result = link_sources(raw_a, raw_b, source_a=source_a, source_b=source_b, vocabulary=vocab)
    files = export_link_result(result, out_dir, fmt)
    metrics = compute_link_metrics(result)

    elapsed = time.perf_counter() - start
    logger.info(
        f"Linking job done in {elapsed:.2f}s: "
        f"{source_a} match rate {metrics['a_match_rate']}%, "
        f"{source_b} match rate {metrics['b_match_rate']}%"
    )
    return {'result': result, 'files': files, 'metrics': metrics, 'elapsed_s': elapsed}
