"""Tests unitaires pour les adapters de métriques.

Ces tests vérifient que les adapters de métriques (Prometheus, InMemory)
implémentent correctement l'interface MetricsPort.
"""

import platform
from datetime import timedelta

import httpx
import pytest
from prometheus_client import REGISTRY
from prometheus_client.parser import text_string_to_metric_families

from resticmetrics.adapters.prometheus import InMemoryMetricsAdapter, PrometheusMetricsAdapter
from resticmetrics.core.errors import (
    MetricsExportError,
    MetricsRegistrationError,
    PushGatewayError,
    TextfileExportError,
)
from resticmetrics.domain.models import ExportFormat, Status, Summary
from resticmetrics.ports.metrics import MetricsPort


FIXED_TIME = 1_700_000_000.0

BACKUP_GAUGES = {
    "resticprofile_backup_files_new": 5,
    "resticprofile_backup_files_changed": 2,
    "resticprofile_backup_files_unmodified": 10,
    "resticprofile_backup_dir_new": 1,
    "resticprofile_backup_dir_changed": 0,
    "resticprofile_backup_dir_unmodified": 3,
    "resticprofile_backup_files_processed": 17,
    "resticprofile_backup_added_bytes": 1024,
    "resticprofile_backup_added_bytes_packed": 512,
    "resticprofile_backup_processed_bytes": 2048,
}


def sample_value(text: str, name: str, labels: dict[str, str]) -> float | None:
    """Cherche la valeur d'une série dans une exposition texte."""
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            if sample.name == name and sample.labels == labels:
                return sample.value
    return None


def make_adapter(**kwargs) -> PrometheusMetricsAdapter:
    options = {
        "profile": "home",
        "version": "1.2.3",
        "restic_version": "0.17.0",
        "clock": lambda: FIXED_TIME,
    }
    options.update(kwargs)
    return PrometheusMetricsAdapter(**options)


# =============================================================================
# Tests PrometheusMetricsAdapter
# =============================================================================


class TestPrometheusMetricsAdapter:
    """Tests pour l'adapter Prometheus."""

    def test_implements_port(self):
        """Vérifie que l'adapter implémente le port."""
        assert isinstance(make_adapter(), MetricsPort)

    def test_build_info_set_at_construction(self):
        """Les gauges d'information sont publiées dès la construction."""
        text = make_adapter().export()

        assert sample_value(
            text,
            "resticprofile_build_info",
            {"profile": "home", "pythonversion": platform.python_version(), "version": "1.2.3"},
        ) == 1.0
        assert sample_value(
            text, "restic_build_info", {"profile": "home", "version": "0.17.0"}
        ) == 1.0

    def test_labels(self):
        """Vérifie la fusion des labels d'identité."""
        adapter = make_adapter(group="daily", labels={"host": "nas", "group": "weekly"})

        assert adapter.labels == {"profile": "home", "group": "weekly", "host": "nas"}

    def test_labels_is_copy(self):
        adapter = make_adapter()
        adapter.labels["profile"] = "changed"

        assert adapter.labels == {"profile": "home"}

    def test_labels_on_every_series(self, backup_summary):
        """Chaque série porte les labels d'identité."""
        adapter = make_adapter(group="daily", labels={"host": "nas"})
        adapter.record_results("backup", Status.SUCCESS, backup_summary)

        for family in text_string_to_metric_families(adapter.export()):
            for sample in family.samples:
                assert sample.labels["profile"] == "home"
                assert sample.labels["group"] == "daily"
                assert sample.labels["host"] == "nas"

    def test_record_backup_saved_to_file(self, tmp_path, backup_summary):
        """Les compteurs du backup sont écrits avec leurs valeurs exactes."""
        adapter = make_adapter()
        adapter.record_results("backup", Status.SUCCESS, backup_summary)
        target = tmp_path / "resticprofile.prom"

        adapter.save_to(str(target))

        text = target.read_text()
        for name, value in BACKUP_GAUGES.items():
            assert f'{name}{{profile="home"}} {float(value)}' in text
            assert sample_value(text, name, {"profile": "home"}) == value

    def test_record_command_gauges(self, backup_summary):
        """Durée, statut et horodatage de la commande."""
        adapter = make_adapter()
        adapter.record_results("backup", Status.WARNING, backup_summary)
        text = adapter.export()
        series = {"profile": "home", "command": "backup"}

        assert sample_value(text, "resticprofile_command_duration_seconds", series) == 12.5
        assert sample_value(text, "resticprofile_command_status", series) == 1.0
        assert sample_value(text, "resticprofile_command_time_seconds", series) == FIXED_TIME

    def test_status_ordinals(self):
        """Failed=0, Warning=1, Success=2."""
        adapter = make_adapter()
        adapter.record_results("check", Status.FAILED, Summary())
        adapter.record_results("forget", Status.WARNING, Summary())
        adapter.record_results("prune", Status.SUCCESS, Summary())
        text = adapter.export()

        def status(command):
            return sample_value(
                text, "resticprofile_command_status", {"profile": "home", "command": command}
            )

        assert status("check") == 0.0
        assert status("forget") == 1.0
        assert status("prune") == 2.0

    def test_non_backup_command_leaves_backup_gauges(self, backup_summary):
        """Une commande check ne modifie pas les gauges backup_*."""
        adapter = make_adapter()
        adapter.record_results("backup", Status.SUCCESS, backup_summary)
        before = {
            name: sample_value(adapter.export(), name, {"profile": "home"})
            for name in BACKUP_GAUGES
        }

        other = Summary(files_new=99, files_total=99, bytes_total=99, duration=3)
        adapter.record_results("check", Status.FAILED, other)
        text = adapter.export()

        for name in BACKUP_GAUGES:
            assert sample_value(text, name, {"profile": "home"}) == before[name]
        assert sample_value(
            text, "resticprofile_command_duration_seconds", {"profile": "home", "command": "check"}
        ) == 3.0

    def test_unknown_command_has_no_backup_series(self):
        """Une commande inconnue n'écrit que les gauges de commande."""
        adapter = make_adapter()
        adapter.record_results("copy", Status.SUCCESS, Summary(files_new=4))
        text = adapter.export()

        assert "resticprofile_backup_files_new{" not in text
        assert sample_value(
            text, "resticprofile_command_status", {"profile": "home", "command": "copy"}
        ) == 2.0

    def test_record_overwrites(self, backup_summary):
        """Les valeurs sont remplacées, pas accumulées."""
        adapter = make_adapter()
        adapter.record_results("backup", Status.SUCCESS, backup_summary)
        adapter.record_results("backup", Status.FAILED, Summary(files_new=1, duration=2))
        text = adapter.export()

        assert sample_value(text, "resticprofile_backup_files_new", {"profile": "home"}) == 1.0
        assert sample_value(text, "resticprofile_backup_added_bytes", {"profile": "home"}) == 0.0
        assert sample_value(
            text, "resticprofile_command_status", {"profile": "home", "command": "backup"}
        ) == 0.0

    def test_duration_timedelta(self):
        adapter = make_adapter()
        adapter.record_results("check", Status.SUCCESS, Summary(duration=timedelta(minutes=2)))

        assert sample_value(
            adapter.export(),
            "resticprofile_command_duration_seconds",
            {"profile": "home", "command": "check"},
        ) == 120.0

    def test_save_to_idempotent(self, tmp_path, backup_summary):
        """Deux exports successifs sont identiques."""
        adapter = make_adapter()
        adapter.record_results("backup", Status.SUCCESS, backup_summary)
        first = tmp_path / "first.prom"
        second = tmp_path / "second.prom"

        adapter.save_to(str(first))
        adapter.save_to(str(second))

        assert first.read_bytes() == second.read_bytes()

    def test_save_to_overwrites(self, tmp_path):
        target = tmp_path / "metrics.prom"
        target.write_text("stale content\n")

        make_adapter().save_to(str(target))

        content = target.read_text()
        assert "stale content" not in content
        assert "resticprofile_build_info" in content

    def test_save_to_unwritable_path(self, tmp_path):
        """Un chemin inaccessible lève TextfileExportError."""
        target = tmp_path / "missing" / "dir" / "metrics.prom"

        with pytest.raises(TextfileExportError) as exc_info:
            make_adapter().save_to(str(target))

        assert exc_info.value.path == str(target)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_isolated_registries(self, backup_summary):
        """Deux publishers identiques ne partagent pas de registre."""
        first = make_adapter()
        second = make_adapter()

        first.record_results("backup", Status.SUCCESS, backup_summary)

        assert first.registry is not second.registry
        assert "resticprofile_backup_files_new{" not in second.export()

    def test_global_registry_untouched(self, backup_summary):
        adapter = make_adapter(profile="isolation-check")
        adapter.record_results("backup", Status.SUCCESS, backup_summary)

        assert REGISTRY.get_sample_value(
            "resticprofile_backup_files_new", {"profile": "isolation-check"}
        ) is None

    def test_duplicate_registration_is_fatal(self):
        """Enregistrer deux fois la même métrique est une erreur."""
        adapter = make_adapter()

        with pytest.raises(MetricsRegistrationError):
            adapter._register(adapter.info)

    def test_reserved_label_collision(self):
        with pytest.raises(MetricsRegistrationError) as exc_info:
            make_adapter(labels={"command": "backup"})

        assert "command" in str(exc_info.value)

    def test_job_label_rejected(self):
        """Un label `job` dupliquerait le job dans le chemin du push gateway."""
        with pytest.raises(MetricsRegistrationError) as exc_info:
            make_adapter(labels={"job": "x"}, push_url="http://gateway:9091")

        assert "job" in str(exc_info.value)

    def test_push_without_gateway(self):
        with pytest.raises(MetricsExportError):
            make_adapter().push()

    def test_export_is_text_format(self):
        text = make_adapter().export()

        assert "# TYPE resticprofile_build_info gauge" in text
        assert "# HELP restic_build_info restic build information." in text


class TestPrometheusMetricsAdapterPush:
    """Tests pour l'envoi au push gateway."""

    def test_push_text(self, backup_summary):
        """L'envoi utilise POST et les labels comme grouping key."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        adapter = make_adapter(
            group="daily", push_url="gateway:9091", push_job="nightly", http_client=client
        )
        adapter.record_results("backup", Status.SUCCESS, backup_summary)

        adapter.push()

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert str(request.url) == adapter.pusher.url
        assert request.url.path.startswith("/metrics/job/nightly/")
        assert "/profile/home" in request.url.path
        assert "/group/daily" in request.url.path
        assert request.headers["Content-Type"].startswith("text/plain")
        body = request.content.decode()
        assert sample_value(
            body, "resticprofile_backup_files_new", {"profile": "home", "group": "daily"}
        ) == 5.0

    def test_push_twice_sends_same_snapshot(self, backup_summary):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content)
            return httpx.Response(202)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        adapter = make_adapter(push_url="http://gateway:9091", http_client=client)
        adapter.record_results("backup", Status.SUCCESS, backup_summary)

        adapter.push()
        adapter.push()

        assert bodies[0] == bodies[1]

    def test_push_protobuf(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["content_type"] = request.headers["Content-Type"]
            captured["body"] = request.content
            return httpx.Response(200)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        adapter = make_adapter(
            push_url="http://gateway:9091",
            push_format=ExportFormat.PROTOBUF,
            http_client=client,
        )

        adapter.push()

        assert "encoding=delimited" in captured["content_type"]
        assert b"resticprofile_build_info" in captured["body"]

    def test_push_unreachable(self):
        """Un gateway injoignable lève PushGatewayError sans planter."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        adapter = make_adapter(push_url="http://gateway:9091", http_client=client)

        with pytest.raises(PushGatewayError) as exc_info:
            adapter.push()

        assert exc_info.value.status_code is None
        assert "unreachable" in str(exc_info.value)

    def test_push_unreachable_real_socket(self):
        adapter = make_adapter(push_url="http://127.0.0.1:1", push_timeout=2.0)
        try:
            with pytest.raises(PushGatewayError):
                adapter.push()
        finally:
            adapter.close()

    def test_push_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, text="text format parsing error")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        adapter = make_adapter(push_url="http://gateway:9091", http_client=client)

        with pytest.raises(PushGatewayError) as exc_info:
            adapter.push()

        assert exc_info.value.status_code == 400
        assert "parsing error" in str(exc_info.value)

    def test_push_does_not_reset_values(self, backup_summary):
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        adapter = make_adapter(push_url="http://gateway:9091", http_client=client)
        adapter.record_results("backup", Status.SUCCESS, backup_summary)

        adapter.push()

        assert sample_value(
            adapter.export(), "resticprofile_backup_files_new", {"profile": "home"}
        ) == 5.0


# =============================================================================
# Tests InMemoryMetricsAdapter
# =============================================================================


class TestInMemoryMetricsAdapter:
    """Tests pour l'adapter InMemory (utilisé pour les tests)."""

    def test_implements_port(self):
        """Vérifie que l'adapter implémente le port."""
        assert isinstance(InMemoryMetricsAdapter(), MetricsPort)

    def test_record_results(self, backup_summary):
        adapter = InMemoryMetricsAdapter()

        adapter.record_results("backup", Status.SUCCESS, backup_summary)
        adapter.record_results("check", Status.WARNING, Summary())

        assert len(adapter.results) == 2
        assert adapter.last_status("backup") == Status.SUCCESS
        assert adapter.last_status("check") == Status.WARNING
        assert adapter.last_status("prune") is None

    def test_labels(self):
        adapter = InMemoryMetricsAdapter(profile="home", group="daily", labels={"host": "nas"})

        assert adapter.labels == {"profile": "home", "group": "daily", "host": "nas"}

    def test_exports(self):
        adapter = InMemoryMetricsAdapter()

        adapter.save_to("/tmp/metrics.prom")
        adapter.push()

        assert adapter.saved_to == ["/tmp/metrics.prom"]
        assert adapter.push_count == 1

    def test_failures(self):
        adapter = InMemoryMetricsAdapter(fail_save=True, fail_push=True)

        with pytest.raises(TextfileExportError):
            adapter.save_to("/tmp/metrics.prom")
        with pytest.raises(PushGatewayError):
            adapter.push()

    def test_clear(self):
        """Vérifie le vidage des métriques."""
        adapter = InMemoryMetricsAdapter()
        adapter.record_results("check", Status.SUCCESS, Summary())
        adapter.push()

        adapter.clear()

        assert adapter.results == []
        assert adapter.push_count == 0
        assert "results_count: 0" in adapter.export()
