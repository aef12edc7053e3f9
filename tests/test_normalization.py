import pytest

from cloudops_metrics.normalization import (
    DisabledNormalizer,
    Normalizer,
    StandardNormalizer,
)
from cloudops_metrics.pdata import (
    Buckets,
    ExponentialHistogramDataPoint,
    HistogramDataPoint,
    NumberDataPoint,
    SummaryDataPoint,
    ValueAtQuantile,
)

SECOND = 1_000_000_000
MS = 1_000_000
T1 = 10 * SECOND
T2 = 20 * SECOND
T3 = 30 * SECOND


def test_normalizer_is_abstract():
    with pytest.raises(TypeError):
        Normalizer()


# Disabled normalizer


def test_disabled_returns_valid_point_unchanged():
    point = NumberDataPoint(start_timestamp=T1, timestamp=T2, value=5)
    result = DisabledNormalizer().normalize_number_data_point(point, "id")
    assert result is point


def test_disabled_fixes_reset_number_point():
    point = NumberDataPoint(start_timestamp=T2, timestamp=T2, value=5)
    result = DisabledNormalizer().normalize_number_data_point(point, "id")
    assert result.start_timestamp == T2 - MS
    assert result.timestamp == T2
    assert result.value == 5
    assert point.start_timestamp == T2


@pytest.mark.parametrize(
    "point,method",
    [
        (HistogramDataPoint(start_timestamp=T3, timestamp=T2), "normalize_histogram_data_point"),
        (SummaryDataPoint(start_timestamp=T3, timestamp=T2), "normalize_summary_data_point"),
        (
            ExponentialHistogramDataPoint(start_timestamp=T3, timestamp=T2),
            "normalize_exponential_histogram_data_point",
        ),
    ],
)
def test_disabled_fixes_reset_other_points(point, method):
    result = getattr(DisabledNormalizer(), method)(point, "id")
    assert result is not point
    assert result.start_timestamp == T2 - MS
    assert point.start_timestamp == T3


# Standard normalizer: number points


def test_standard_drops_first_point_without_start():
    normalizer = StandardNormalizer()
    point = NumberDataPoint(start_timestamp=0, timestamp=T1, value=10)
    assert normalizer.normalize_number_data_point(point, "id") is None
    cached, found = normalizer.cache.get_number_data_point("id")
    assert found
    assert cached is point


def test_standard_passes_point_with_start_through():
    normalizer = StandardNormalizer()
    point = NumberDataPoint(start_timestamp=T1, timestamp=T2, value=10)
    assert normalizer.normalize_number_data_point(point, "id") is point


def test_standard_subtracts_cached_number_point():
    normalizer = StandardNormalizer()
    first = NumberDataPoint(start_timestamp=0, timestamp=T1, value=10)
    second = NumberDataPoint(start_timestamp=0, timestamp=T2, value=15)
    normalizer.normalize_number_data_point(first, "id")
    result = normalizer.normalize_number_data_point(second, "id")
    assert result.value == second.value - first.value
    assert result.start_timestamp == first.timestamp
    assert result.timestamp == T2
    assert second.value == 15
    assert second.start_timestamp == 0


def test_standard_subtracts_double_values():
    normalizer = StandardNormalizer()
    first = NumberDataPoint(timestamp=T1, value=1.5)
    second = NumberDataPoint(timestamp=T2, value=4.0)
    normalizer.normalize_number_data_point(first, "id")
    result = normalizer.normalize_number_data_point(second, "id")
    assert result.value == second.value - first.value


def test_standard_identifiers_are_independent():
    normalizer = StandardNormalizer()
    normalizer.normalize_number_data_point(NumberDataPoint(timestamp=T1, value=3), "a")
    point = NumberDataPoint(timestamp=T2, value=7)
    assert normalizer.normalize_number_data_point(point, "b") is None


def test_standard_explicit_reset_is_cached_and_dropped():
    normalizer = StandardNormalizer()
    normalizer.normalize_number_data_point(NumberDataPoint(timestamp=T1, value=10), "id")
    reset = NumberDataPoint(start_timestamp=T2, timestamp=T2, value=1)
    assert normalizer.normalize_number_data_point(reset, "id") is None
    after = NumberDataPoint(start_timestamp=T2, timestamp=T3, value=4)
    result = normalizer.normalize_number_data_point(after, "id")
    assert result.value == after.value - reset.value
    assert result.start_timestamp == reset.timestamp


def test_standard_drops_point_older_than_reset():
    normalizer = StandardNormalizer()
    reset = NumberDataPoint(start_timestamp=T3, timestamp=T3, value=1)
    normalizer.normalize_number_data_point(reset, "id")
    older = NumberDataPoint(start_timestamp=T1, timestamp=T2, value=9)
    assert normalizer.normalize_number_data_point(older, "id") is None
    cached, _ = normalizer.cache.get_number_data_point("id")
    assert cached is reset


# Standard normalizer: histograms


def test_standard_histogram_subtracts_counts_and_buckets():
    normalizer = StandardNormalizer()
    first = HistogramDataPoint(
        timestamp=T1, count=3, sum=6.0, bucket_counts=[1, 2], explicit_bounds=[1.0]
    )
    second = HistogramDataPoint(
        timestamp=T2, count=8, sum=10.0, bucket_counts=[3, 5], explicit_bounds=[1.0]
    )
    assert normalizer.normalize_histogram_data_point(first, "id") is None
    result = normalizer.normalize_histogram_data_point(second, "id")
    assert result.count == second.count - first.count
    assert result.sum == second.sum - first.sum
    assert result.bucket_counts == [3 - 1, 5 - 2]
    assert result.start_timestamp == first.timestamp
    assert second.bucket_counts == [3, 5]


def test_standard_histogram_bounds_change_is_reset():
    normalizer = StandardNormalizer()
    first = HistogramDataPoint(timestamp=T1, bucket_counts=[1, 2], explicit_bounds=[1.0])
    changed = HistogramDataPoint(
        timestamp=T2, bucket_counts=[1, 2, 3], explicit_bounds=[1.0, 2.0]
    )
    normalizer.normalize_histogram_data_point(first, "id")
    assert normalizer.normalize_histogram_data_point(changed, "id") is None
    cached, found = normalizer.cache.get_histogram_data_point("id")
    assert found
    assert cached is changed


# Standard normalizer: exponential histograms


def test_standard_exponential_histogram_aligns_offsets():
    normalizer = StandardNormalizer()
    first = ExponentialHistogramDataPoint(
        timestamp=T1,
        count=6,
        sum=3.0,
        zero_count=1,
        positive=Buckets(0, [1, 2, 3]),
        negative=Buckets(0, [4]),
    )
    second = ExponentialHistogramDataPoint(
        timestamp=T2,
        count=20,
        sum=9.0,
        zero_count=4,
        positive=Buckets(1, [5, 6, 7]),
        negative=Buckets(0, [6]),
    )
    normalizer.normalize_exponential_histogram_data_point(first, "id")
    result = normalizer.normalize_exponential_histogram_data_point(second, "id")
    assert result.positive.offset == 1
    assert result.positive.bucket_counts == [5 - 2, 6 - 3, 7]
    assert result.negative.bucket_counts == [6 - 4]
    assert result.count == second.count - first.count
    assert result.zero_count == second.zero_count - first.zero_count
    assert second.positive.bucket_counts == [5, 6, 7]


def test_standard_exponential_histogram_scale_change_is_reset():
    normalizer = StandardNormalizer()
    first = ExponentialHistogramDataPoint(timestamp=T1, scale=2)
    rescaled = ExponentialHistogramDataPoint(timestamp=T2, scale=3)
    normalizer.normalize_exponential_histogram_data_point(first, "id")
    assert normalizer.normalize_exponential_histogram_data_point(rescaled, "id") is None
    cached, _ = normalizer.cache.get_exponential_histogram_data_point("id")
    assert cached is rescaled


# Standard normalizer: summaries


def test_standard_summary_keeps_quantiles():
    normalizer = StandardNormalizer()
    quantiles = [ValueAtQuantile(0.5, 2.0)]
    first = SummaryDataPoint(timestamp=T1, count=2, sum=4.0)
    second = SummaryDataPoint(timestamp=T2, count=5, sum=9.0, quantile_values=quantiles)
    normalizer.normalize_summary_data_point(first, "id")
    result = normalizer.normalize_summary_data_point(second, "id")
    assert result.count == second.count - first.count
    assert result.sum == second.sum - first.sum
    assert result.quantile_values == quantiles
    assert result.start_timestamp == first.timestamp