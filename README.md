# oteloperator

Building blocks for managing OpenTelemetry Collector instances: a resource
model with admission defaulting and validation, a task-based reconciler, and a
small Prometheus target allocator that shares scrape targets out among
collector instances and serves the result over HTTP.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `oteloperator.api`: the resource model. `OpenTelemetryCollector` (with
  `OpenTelemetryCollectorSpec`, `OpenTelemetryCollectorStatus`,
  `TargetAllocatorSpec`), `Instrumentation` (with `InstrumentationSpec`,
  `Exporter`, `Sampler`, `JavaSpec`, `NodeJSSpec`), `ObjectMeta`, and the
  `Mode`, `Propagator` and `SamplerType` enumerations. Kubernetes core objects
  such as volumes, env vars and tolerations are kept as plain dicts.
  `collector_to_dict` / `collector_from_dict` and `instrumentation_to_dict` /
  `instrumentation_from_dict` convert to and from the JSON form; empty fields
  are left out, and a wrong `apiVersion` or `kind` raises `ValueError`.
- `oteloperator.webhook`: `apply_defaults` sets the mode to `deployment` when
  none is given and adds the `app.kubernetes.io/managed-by` label.
  `validate_create` and `validate_update` raise `ValidationError` when
  `volumeClaimTemplates` are used outside `statefulset` mode, `replicas` in
  `sidecar` or `daemonset` mode, `tolerations` in `sidecar` mode, or when the
  target allocator is enabled outside `statefulset` mode or with a config that
  is not valid YAML. `validate_delete` always allows.
- `oteloperator.version`: `get()` returns a `Version` with the operator,
  collector, target allocator and Java auto-instrumentation versions and the
  Python version. Unset component versions fall back to `0.0.0`.
- `oteloperator.adapters`: `config_from_string` parses a collector's YAML
  configuration into a mapping; empty text gives `{}`, bad input raises
  `InvalidYAMLError`.
- `oteloperator.metadata`: `labels` and `annotations` for objects owned by a
  collector. The annotations carry Prometheus scrape defaults, which the
  instance's annotations may override, and always the SHA-256 of the config.
- `oteloperator.autodetect`: `AutoDetect(host).platform()` reads `<host>/apis`
  and returns `Platform.OPENSHIFT` when the `route.openshift.io` group is
  served, `Platform.KUBERNETES` otherwise; a failed request raises
  `AutoDetectError`.
- `oteloperator.config`: the operator's runtime `Config`. `auto_detect()`
  detects the platform while it is still unknown and calls the `on_change`
  callbacks when it changes; `start_auto_detect()` does one run and then keeps
  detecting in a background thread until `stop()`.
- `oteloperator.controller`: `Reconciler` fetches a collector through the
  client it is given and runs its `Task`s in order. A failing task is logged;
  if its `bail_on_error` is set the error is raised and the run stops. A
  client raising `NotFoundError` makes `reconcile` return quietly.
- `oteloperator.allocation`: the least-loaded `Allocator`. Stage targets with
  `set_waiting_targets`, set collectors with `set_collectors`, then
  `allocate_targets()` (keeps existing assignments) or
  `reallocate_collectors()` (starts over). `targets_by_job` and
  `targets_by_collector_and_job` build the HTTP views.
- `oteloperator.collector_watch`: `CollectorWatcher` keeps the set of live
  collector pods from `initial(pods)` and from a stream of `PodEvent`s passed
  to `run()`, reporting the names to a callback after every change.
- `oteloperator.allocator_config`: `load(file)` and `parse(text)` read the
  allocator configuration (`label_selector` and `config`) strictly: unknown
  top-level fields and duplicate keys raise `ConfigError`.
- `oteloperator.server`: `AllocatorApp`, a WSGI application, and `main`, the
  `otel-allocator` command.

## Example

```python
from oteloperator.api import OpenTelemetryCollector, ObjectMeta, Mode
from oteloperator.webhook import apply_defaults, validate_create
from oteloperator.metadata import labels

collector = OpenTelemetryCollector(metadata=ObjectMeta(name="my-instance", namespace="default"))
apply_defaults(collector)
assert collector.spec.mode is Mode.DEPLOYMENT
validate_create(collector)
print(labels(collector)["app.kubernetes.io/instance"])  # default.my-instance
```

## Running the target allocator

```
otel-allocator --listen-addr :8080 --config-dir /conf/ --collector col-1 --collector col-2
```

The command reads `targetallocator.yaml` from the config directory, takes the
targets listed under `static_configs` of each scrape config, and shares them
out among the collectors named with `--collector`. Without any `--collector`
no targets are allocated. It answers:

- `GET /jobs`: every allocated job with a link to its targets.
- `GET /jobs/<job_id>/targets`: the targets of a job grouped by collector.
  Add `?collector_id=<name>` for only the targets of that collector.

Other paths give 404, other methods 405. The config directory is checked once
a second; when a new file appears the configuration is loaded again. The
command stops on SIGTERM or Ctrl-C and exits with status 1 if it cannot start.

## What it does not do

- It does not talk to the Kubernetes API. There is no cluster client: the
  `Reconciler` has no built-in tasks and creates no ConfigMaps, Services,
  Deployments, DaemonSets or StatefulSets; you supply the client and the tasks.
- There is no admission webhook server; the webhook functions are plain
  Python calls.
- The target allocator does not run Prometheus service discovery; only
  `static_configs` targets are read. It does not watch collector pods in a
  cluster either; collectors come from `--collector`, or from the events you
  feed to `CollectorWatcher`.