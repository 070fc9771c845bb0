"""
Descriptor classification.

Inspects every descriptor column across all records and infers whether it
is numerical or categorical, together with its value domain. Downstream
colour scales, axes and legends depend on this table, so it is computed
once over the unfiltered records and never recomputed on filtering.

Rule (non-missing values V of a column):
    V empty                                      -> categorical, domain ()
    numeric fraction > 0.8 and distinct > 6      -> numerical, (min, max)
    otherwise                                    -> categorical, sorted distinct
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from phylodash.core.records import is_missing, parse_number
from phylodash.models.config import ClassifierConfig
from phylodash.models.descriptors import (
    DescriptorInfo,
    DescriptorType,
    DescriptorValue,
    Record,
)

logger = logging.getLogger(__name__)


def _distinct_key(value: object) -> object:
    # Strings that look numeric count as the number they denote
    number = parse_number(value)
    return value if number is None else number


def classify_descriptor(
    name: str,
    values: Iterable[DescriptorValue | str],
    config: ClassifierConfig | None = None,
) -> DescriptorInfo:
    """
    Classify one descriptor column.

    Args:
        name: Descriptor name.
        values: Column values across all records (coerced or raw text).
        config: Thresholds; defaults to 0.8 numeric fraction and 6 distinct values.

    Returns:
        DescriptorInfo with inferred type and domain.

    Example:
        >>> classify_descriptor("x", ["3", "NA", "1", "", 5, 2, 4, 6, 7]).domain
        (1.0, 7.0)
    """
    config = config or ClassifierConfig()
    present = [v for v in values if not is_missing(v, config.missing_tokens)]

    if not present:
        return DescriptorInfo(name=name, type=DescriptorType.CATEGORICAL, domain=())

    numbers = [n for n in (parse_number(v) for v in present) if n is not None]
    numeric_fraction = len(numbers) / len(present)
    distinct_count = len({_distinct_key(v) for v in present})

    is_numerical = (
        numeric_fraction > config.numeric_fraction_threshold
        and distinct_count > config.min_distinct_numeric
    )

    if is_numerical:
        info = DescriptorInfo(
            name=name,
            type=DescriptorType.NUMERICAL,
            domain=(float(min(numbers)), float(max(numbers))),
        )
    else:
        info = DescriptorInfo(
            name=name,
            type=DescriptorType.CATEGORICAL,
            domain=tuple(sorted({category_label(v) for v in present})),
        )

    logger.debug(
        "Descriptor %s: %s (numeric fraction %.2f, %d distinct)",
        name,
        info.type.value,
        numeric_fraction,
        distinct_count,
    )
    return info


def category_label(value: object) -> str:
    """
    String form of a value as it appears in categorical domains.

    Numeric values are labelled by the number they denote, with integral
    floats printed without a fraction, so 1, 1.0 and "1.0" all become "1".
    """
    number = parse_number(value)
    if number is not None:
        if isinstance(number, float) and number.is_integer():
            return str(int(number))
        return str(number)
    if isinstance(value, str):
        return value.strip()
    return str(value)


def classify_descriptors(
    records: Sequence[Record],
    descriptor_keys: Sequence[str],
    config: ClassifierConfig | None = None,
) -> dict[str, DescriptorInfo]:
    """
    Classify every descriptor column.

    Pure function of its inputs: the returned table is a fresh dict in
    ``descriptor_keys`` order.

    Args:
        records: All (unfiltered) records.
        descriptor_keys: Descriptor column names.
        config: Classification thresholds.

    Returns:
        Mapping of descriptor name to DescriptorInfo.
    """
    config = config or ClassifierConfig()
    table = {
        key: classify_descriptor(key, (r.value(key) for r in records), config)
        for key in descriptor_keys
    }

    numerical = sum(1 for info in table.values() if info.is_numerical)
    logger.debug(
        "Classified %d descriptors: %d numerical, %d categorical",
        len(table),
        numerical,
        len(table) - numerical,
    )
    return table
