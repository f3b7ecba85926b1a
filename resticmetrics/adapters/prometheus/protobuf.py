"""Protobuf delimited exposition format.

prometheus_client only produces the text format. The push gateway also
accepts length-delimited ``io.prometheus.client.MetricFamily`` messages;
the message types are built at runtime from a descriptor so no generated
code is shipped.
"""

from functools import lru_cache

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from prometheus_client import CollectorRegistry


CONTENT_TYPE_PROTOBUF_DELIMITED = (
    "application/vnd.google.protobuf; "
    "proto=io.prometheus.client.MetricFamily; encoding=delimited"
)

_PACKAGE = "io.prometheus.client"

# MetricType enum values from metrics.proto
COUNTER = 0
GAUGE = 1
UNTYPED = 3

_FDP = descriptor_pb2.FieldDescriptorProto


def _add_field(message, name: str, number: int, field_type: int, type_name: str = "", repeated: bool = False):
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_FDP.LABEL_REPEATED if repeated else _FDP.LABEL_OPTIONAL,
    )
    # scalar fields must not carry a type_name, even an empty one
    if type_name:
        field.type_name = type_name


def _file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Subset of io/prometheus/client/metrics.proto needed for gauges and counters."""
    fdp = descriptor_pb2.FileDescriptorProto(
        name="io/prometheus/client/metrics.proto",
        package=_PACKAGE,
        syntax="proto2",
    )

    metric_type = fdp.enum_type.add(name="MetricType")
    for number, name in enumerate(("COUNTER", "GAUGE", "SUMMARY", "UNTYPED", "HISTOGRAM")):
        metric_type.value.add(name=name, number=number)

    label_pair = fdp.message_type.add(name="LabelPair")
    _add_field(label_pair, "name", 1, _FDP.TYPE_STRING)
    _add_field(label_pair, "value", 2, _FDP.TYPE_STRING)

    for value_type in ("Gauge", "Counter", "Untyped"):
        message = fdp.message_type.add(name=value_type)
        _add_field(message, "value", 1, _FDP.TYPE_DOUBLE)

    metric = fdp.message_type.add(name="Metric")
    _add_field(metric, "label", 1, _FDP.TYPE_MESSAGE, f".{_PACKAGE}.LabelPair", repeated=True)
    _add_field(metric, "gauge", 2, _FDP.TYPE_MESSAGE, f".{_PACKAGE}.Gauge")
    _add_field(metric, "counter", 3, _FDP.TYPE_MESSAGE, f".{_PACKAGE}.Counter")
    _add_field(metric, "untyped", 5, _FDP.TYPE_MESSAGE, f".{_PACKAGE}.Untyped")
    _add_field(metric, "timestamp_ms", 6, _FDP.TYPE_INT64)

    family = fdp.message_type.add(name="MetricFamily")
    _add_field(family, "name", 1, _FDP.TYPE_STRING)
    _add_field(family, "help", 2, _FDP.TYPE_STRING)
    _add_field(family, "type", 3, _FDP.TYPE_ENUM, f".{_PACKAGE}.MetricType")
    _add_field(family, "metric", 4, _FDP.TYPE_MESSAGE, f".{_PACKAGE}.Metric", repeated=True)

    return fdp


@lru_cache(maxsize=None)
def metric_family_class():
    """Return the generated ``MetricFamily`` message class."""
    pool = descriptor_pool.DescriptorPool()
    pool.AddSerializedFile(_file_descriptor().SerializeToString())
    descriptor = pool.FindMessageTypeByName(f"{_PACKAGE}.MetricFamily")
    return message_factory.GetMessageClass(descriptor)


def encode_varint(value: int) -> bytes:
    out = bytearray()
    while True:
        bits = value & 0x7F
        value >>= 7
        if value:
            out.append(bits | 0x80)
        else:
            out.append(bits)
            return bytes(out)


def _family_for(metric):
    """Map a prometheus_client metric family onto MetricFamily messages."""
    MetricFamily = metric_family_class()

    if metric.type == "gauge":
        proto_type, value_field, suffix = GAUGE, "gauge", ""
    elif metric.type == "counter":
        proto_type, value_field, suffix = COUNTER, "counter", "_total"
    else:
        proto_type, value_field, suffix = UNTYPED, "untyped", ""

    family = MetricFamily(name=metric.name + suffix, help=metric.documentation, type=proto_type)
    for sample in metric.samples:
        if sample.name != family.name:
            # _created, _bucket, ... have no place in these simple types
            continue
        entry = family.metric.add()
        for name, value in sample.labels.items():
            entry.label.add(name=name, value=value)
        getattr(entry, value_field).value = float(sample.value)
        if sample.timestamp is not None:
            entry.timestamp_ms = int(float(sample.timestamp) * 1000)
    return family


def generate_delimited(registry: CollectorRegistry) -> bytes:
    """Encode every family of ``registry`` as length-delimited protobuf."""
    output = bytearray()
    for metric in registry.collect():
        family = _family_for(metric)
        if not family.metric:
            continue
        data = family.SerializeToString()
        output += encode_varint(len(data))
        output += data
    return bytes(output)
