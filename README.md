# cloudops-metrics

Building blocks for exporting metrics to a cloud monitoring backend. The
package has no dependencies beyond the standard library.

## Modules

- **Configuration** (`cloudops_metrics.config`): the `Config`,
  `MetricConfig`, `TraceConfig`, `LogConfig`, `ClientConfig`,
  `AttributeMapping` and `ResourceFilter` dataclasses, with
  `default_config()` and `validate_config()`. `default_config()` sets the
  user agent, the `workload.googleapis.com` prefix, the known domains
  (`googleapis.com`, `kubernetes.io`, `istio.io`, `knative.dev`), a metric
  descriptor buffer size of 10, and turns on instrumentation library
  labels, service resource labels and cumulative normalization.
  `validate_config()` raises `ConfigError` (a `ValueError`) when the trace
  attribute mappings repeat a key or a replacement. `DEFAULT_TIMEOUT` is
  12 seconds.
- **Metric data model** (`cloudops_metrics.pdata`): `Metric` with its
  `MetricDataType`, `Resource`, `MonitoredResource`, and the data point
  dataclasses `NumberDataPoint`, `HistogramDataPoint`,
  `ExponentialHistogramDataPoint` (with `Buckets`) and `SummaryDataPoint`
  (with `ValueAtQuantile`). Each point has a `copy()` method.
  `value_as_string()` renders an attribute value as text. Timestamps are
  integers in nanoseconds.
- **Point cache** (`cloudops_metrics.datapointcache`): `Cache` stores one
  reference point per identifier for each point kind; `get_*` methods
  return `(point, found)`. `collect()` drops entries that were not used
  since the previous collection and marks the rest unused. `gc()` waits on
  a `queue.Queue` of ticks and a `threading.Event` for shutdown, and
  `start()` runs collection every `interval` seconds (20 minutes by
  default) in a daemon thread until the event is set. `identifier()` builds
  a stable key for a series from the monitored resource labels, extra
  labels, metric name and sorted point attributes.
- **Normalization** (`cloudops_metrics.normalization`): the abstract
  `Normalizer` and two implementations. `StandardNormalizer` caches the
  first point of a cumulative series that has no start time, or an
  explicit reset point, drops it, and subtracts it from later points.
  Histograms whose bucket bounds change, and exponential histograms whose
  scale changes, are treated as resets. Points older than the cached reset
  are dropped and logged. `DisabledNormalizer` does no subtraction; it only
  gives reset points a start time one millisecond before their timestamp.
  Every method returns the point to export, or `None` to drop it.
- **Google Managed Prometheus** (`cloudops_metrics.gmp`):
  `gmp.naming.get_metric_name()` appends the type suffix (`/counter`,
  `/gauge`, `/summary`, `/summary:counter` for `_sum` summaries,
  `/histogram`) and raises `ValueError` for other data types.
  `gmp.monitoredresource.map_to_prometheus_target()` maps resource
  attributes to a `prometheus_target` monitored resource.
  `gmp.config.GMPConfig.to_collector_config()` returns a `Config` set up
  for managed Prometheus, `GMPExporterConfig.validate()` checks it, and
  `create_default_config()` returns the default exporter settings.
- **Census-style metric builders** (`cloudops_metrics.ocmetrics`):
  `gauge`, `gauge_int`, `gauge_dist`, `cumulative`, `cumulative_int`,
  `cumulative_dist`, `summary`, `timeseries`, `double`, `dist_pt` and
  `summ_pt`, for building metric fixtures.

## What the package does not do

It has no exporter: it does not connect to a monitoring, tracing or
logging API, does not send time series, metric descriptors or log
entries, and has no command-line tool or server. The configuration
classes describe such an exporter's settings, but nothing in the package
reads them from files.

## Installation

```
pip install .
```

## Example

```python
from cloudops_metrics.config import AttributeMapping, default_config, validate_config
from cloudops_metrics.gmp.naming import get_metric_name
from cloudops_metrics.normalization import StandardNormalizer
from cloudops_metrics.pdata import Metric, MetricDataType, NumberDataPoint

cfg = default_config()
cfg.trace_config.attribute_mappings = [AttributeMapping(key="foo", replacement="bar")]
validate_config(cfg)

metric = Metric(name="requests_total", data_type=MetricDataType.SUM)
print(get_metric_name("requests_total", metric))  # requests_total/counter

normalizer = StandardNormalizer()
first = NumberDataPoint(timestamp=1_000, value=10)
later = NumberDataPoint(timestamp=2_000, value=15)
print(normalizer.normalize_number_data_point(first, "series"))  # None (cached)
print(normalizer.normalize_number_data_point(later, "series").value)  # 5
```

## Running the tests

```
pip install ".[test]"
pytest
```