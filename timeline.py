"""Curated historical AI-capability data.

Static data derived from Epoch AI's public frontier datasets, used by the
enricher to describe the AI landscape at the moment a claim was made.

Contents:
    FRONTIER_MODELS: Models that held the training-compute frontier, by date
    MMLU_FRONTIER: Best known MMLU score (%) over time
    TRAINING_COMPUTE_FRONTIER: Frontier training compute (log10 FLOP) over time

Both metric series are sorted by date and linearly interpolated between
points. The model timeline is a step function.
"""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class FrontierModel:
    """A model that became the compute frontier on ``released``."""
    released: date
    model: str
    org: str


@dataclass(frozen=True)
class MetricPoint:
    when: date
    value: float


@dataclass(frozen=True)
class MetricSeries:
    """A named, date-sorted metric series."""
    name: str
    unit: str
    points: tuple[MetricPoint, ...]

    @property
    def start(self) -> date:
        return self.points[0].when

    @property
    def end(self) -> date:
        return self.points[-1].when


def _series(name: str, unit: str, rows: list[tuple[str, float]]) -> MetricSeries:
    return MetricSeries(
        name=name,
        unit=unit,
        points=tuple(MetricPoint(date.fromisoformat(d), v) for d, v in rows),
    )


FRONTIER_MODELS: tuple[FrontierModel, ...] = tuple(
    FrontierModel(date.fromisoformat(d), model, org)
    for d, model, org in [
        ("1950-07-02", "Theseus", "Bell Laboratories"),
        ("1957-01-01", "Perceptron Mark I", "Cornell Aeronautical Laboratory"),
        ("1959-02-01", "Pandemonium (morse)", "MIT"),
        ("1960-03-30", "Perceptron (1960)", "Cornell Aeronautical Laboratory"),
        ("1987-06-06", "NetTalk (transcription)", "Princeton University"),
        ("1989-11-27", "Handwritten digit recognition network", "AT&T"),
        ("1989-12-01", "Zip CNN", "AT&T Bell Laboratories"),
        ("1992-05-01", "TD-Gammon", "IBM"),
        ("1994-12-02", "Predictive Coding NN", "Technical University of Munich"),
        ("1997-11-15", "LSTM", "Technical University of Munich"),
        ("2000-11-28", "PoE MNIST", "University College London"),
        ("2000-11-28", "Neural LM", "University of Montreal"),
        ("2007-06-22", "SB-LM", "Google"),
        ("2013-01-16", "DistBelief NNLM", "Google"),
        ("2014-06-18", "SPPNet", "Microsoft"),
        ("2014-09-04", "VGG16", "University of Oxford"),
        ("2014-09-10", "Seq2Seq LSTM", "Google"),
        ("2014-12-03", "SNM-skip", "Google"),
        ("2015-10-01", "AlphaGo Fan", "DeepMind"),
        ("2016-01-27", "AlphaGo Lee", "DeepMind"),
        ("2016-09-26", "GNMT", "Google"),
        ("2018-05-02", "ResNeXt-101 32x48d", "Facebook"),
        ("2019-09-17", "Megatron-BERT", "NVIDIA"),
        ("2019-10-23", "T5-11B", "Google"),
        ("2019-10-30", "AlphaStar", "DeepMind"),
        ("2020-01-28", "Meena", "Google Brain"),
        ("2020-05-28", "GPT-3 175B (davinci)", "OpenAI"),
        ("2021-05-31", "Wu Dao 2.0", "BAAI"),
        ("2021-09-03", "FLAN 137B", "Google Research"),
        ("2022-04-04", "PaLM (540B)", "Google Research"),
        ("2022-06-29", "Minerva (540B)", "Google"),
        ("2023-03-15", "GPT-4", "OpenAI"),
        ("2023-12-06", "Gemini 1.0 Ultra", "Google DeepMind"),
        ("2025-02-17", "Grok 3", "xAI"),
        ("2025-02-27", "GPT-4.5", "OpenAI"),
        ("2025-07-09", "Grok 4", "xAI"),
    ]
)

MMLU_FRONTIER = _series("MMLU", "%", [
    ("2021-08-01", 25.7),
    ("2021-12-01", 60.0),
    ("2022-03-01", 70.0),
    ("2023-03-01", 86.4),
    ("2024-06-01", 86.5),
    ("2024-09-01", 86.9),
    ("2024-10-01", 87.3),
    ("2024-11-01", 88.1),
])

TRAINING_COMPUTE_FRONTIER = _series("Training compute", "log10 FLOP", [
    ("1950-07-01", 1.6),
    ("1956-12-01", 5.8),
    ("1959-01-01", 8.8),
    ("1960-03-01", 8.9),
    ("1987-06-01", 10.5),
    ("1989-11-01", 12.2),
    ("1992-04-01", 13.3),
    ("1994-12-01", 13.3),
    ("1997-11-01", 13.5),
    ("2000-11-01", 15.8),
    ("2007-06-01", 18.2),
    ("2013-01-01", 18.4),
    ("2014-06-01", 18.5),
    ("2014-09-01", 19.7),
    ("2014-12-01", 20.5),
    ("2015-09-01", 20.6),
    ("2016-01-01", 21.3),
    ("2016-09-01", 21.8),
    ("2018-05-01", 21.9),
    ("2019-09-01", 22.3),
    ("2019-10-01", 23.0),
    ("2020-01-01", 23.0),
    ("2020-05-01", 23.5),
    ("2021-08-01", 23.6),
    ("2021-09-01", 24.3),
    ("2022-04-01", 24.4),
    ("2022-06-01", 24.4),
    ("2023-03-01", 25.3),
    ("2023-12-01", 25.7),
    ("2025-02-01", 26.6),
    ("2025-07-01", 26.7),
])


def get_frontier_model_at_date(when: date) -> FrontierModel:
    """Return the frontier model as of ``when``.

    Picks the last entry released on or before the date. Dates before the
    first entry get the earliest model, so the lookup never fails.
    """
    result = FRONTIER_MODELS[0]
    for entry in FRONTIER_MODELS:
        if entry.released > when:
            break
        result = entry
    return result


def get_metric_value_at_date(series: MetricSeries, when: date) -> float | None:
    """Interpolate a metric series at ``when``.

    Returns:
        The interpolated value, the last value for dates past the end of
        the series, or None for dates before the series starts
    """
    points = series.points
    if when < series.start:
        return None
    if when >= series.end:
        return points[-1].value

    for left, right in zip(points, points[1:]):
        if left.when <= when <= right.when:
            span = (right.when - left.when).days
            if span == 0:
                return right.value
            ratio = (when - left.when).days / span
            return left.value + ratio * (right.value - left.value)
    return points[-1].value
