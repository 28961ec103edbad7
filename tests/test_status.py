from __future__ import annotations

import math

import pytest

from models.records import StatusLabel
from models.thresholds import StatusThresholds
from services.status import (
    CRITICAL_STATUS,
    NORMAL_STATUS,
    WARNING_STATUS,
    StatusClassifier,
)


@pytest.mark.parametrize(
    "voltage,current,expected",
    [
        (3.4, 0.0, StatusLabel.critical),
        (3.5, 7.0, StatusLabel.critical),
        (3.9, 14.25, StatusLabel.critical),
        (3.9, -14.25, StatusLabel.critical),
        (3.4, 9.6, StatusLabel.critical),
        (3.9, 9.5, StatusLabel.warning),
        (3.9, -9.5, StatusLabel.warning),
        (3.69, 7.0, StatusLabel.warning),
        (3.6, 9.6, StatusLabel.warning),
        (3.9, 14.2, StatusLabel.warning),
        (3.7, 7.0, StatusLabel.normal),
        (3.9, 7.0, StatusLabel.normal),
        (4.2, 0.0, StatusLabel.normal),
    ],
)
def test_latest_reading_classification(voltage: float, current: float, expected: StatusLabel) -> None:
    assessment = StatusClassifier().classify([3.9, voltage], [7.0, current])

    assert assessment is not None
    assert assessment.label is expected


def test_only_latest_reading_counts() -> None:
    assessment = StatusClassifier().classify([3.0, 3.2, 3.9], [20.0, 15.0, 7.0])

    assert assessment is NORMAL_STATUS


def test_descriptions_and_classes() -> None:
    assert CRITICAL_STATUS.css_class == "status-critical"
    assert CRITICAL_STATUS.description == (
        "Voltage or current in unsafe region. Reduce load / disconnect pack."
    )
    assert WARNING_STATUS.css_class == "status-warning"
    assert WARNING_STATUS.description == (
        "Voltage dropping or current high. Monitor operating conditions."
    )
    assert NORMAL_STATUS.css_class == "status-normal"
    assert NORMAL_STATUS.description == (
        "Battery operating within nominal voltage and current limits."
    )


def test_empty_sequences_have_no_status() -> None:
    assert StatusClassifier().classify([], []) is None


def test_nan_latest_reading_matches_no_rule() -> None:
    assessment = StatusClassifier().classify([math.nan], [math.nan])

    assert assessment is NORMAL_STATUS


def test_custom_thresholds() -> None:
    classifier = StatusClassifier(StatusThresholds(critical_voltage=3.0, min_safe_voltage=3.2, high_current=5.0))

    assert classifier.classify_reading(3.1, 0.0) is WARNING_STATUS
    assert classifier.classify_reading(3.3, 7.5) is CRITICAL_STATUS
