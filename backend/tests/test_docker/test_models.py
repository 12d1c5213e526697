"""
Tests for Docker data models

Covers the create payload derived from a ContainerSpec and handle bookkeeping.
"""

import pytest

from tosbur.docker.exceptions import ValidationError
from tosbur.docker.models import (
    TRANSITIONS,
    ContainerHandle,
    ContainerPhase,
    ContainerSpec,
)


class TestContainerSpecPayload:
    """Tests for ContainerSpec.to_create_payload"""

    def test_bind_and_exposed_port(self):
        """Test the documented example payload"""
        spec = ContainerSpec(image="jupyter/base-notebook", mount="/home/user/work")

        payload = spec.to_create_payload()

        assert payload["HostConfig"]["Binds"] == ["/home/user/work:/home/jovyan/"]
        assert payload["ExposedPorts"] == {"8888/tcp": {}}
        assert payload["Image"] == "jupyter/base-notebook"

    def test_baseline_flags(self):
        """Test stdout attached, tty on, no stdin"""
        payload = ContainerSpec(image="jupyter/base-notebook", mount="/tmp").to_create_payload()

        assert payload["AttachStdout"] is True
        assert payload["Tty"] is True
        assert payload["AttachStdin"] is False
        assert payload["OpenStdin"] is False

    def test_port_binding_uses_host_port(self):
        """Test the notebook port is published on the configured host port"""
        spec = ContainerSpec(image="jupyter/base-notebook", mount="/tmp", host_port="9999")

        bindings = spec.to_create_payload()["HostConfig"]["PortBindings"]

        assert bindings == {"8888/tcp": [{"HostPort": "9999"}]}

    def test_payload_is_fresh_each_call(self):
        """Test mutating one payload does not leak into the next"""
        spec = ContainerSpec(image="jupyter/base-notebook", mount="/tmp")

        first = spec.to_create_payload()
        first["Tty"] = False
        first["HostConfig"]["Binds"].append("/x:/y")

        second = spec.to_create_payload()
        assert second["Tty"] is True
        assert second["HostConfig"]["Binds"] == ["/tmp:/home/jovyan/"]

    def test_name_not_in_payload(self):
        """Test the container name travels as a query parameter, not in the body"""
        spec = ContainerSpec(image="jupyter/base-notebook", mount="/tmp", name="nb")

        assert "name" not in spec.to_create_payload()
        assert "Name" not in spec.to_create_payload()


class TestContainerSpecValidation:
    """Tests for ContainerSpec construction"""

    def test_spec_is_immutable(self):
        spec = ContainerSpec(image="jupyter/base-notebook", mount="/tmp")

        with pytest.raises(AttributeError):
            spec.image = "other"

    @pytest.mark.parametrize("image", ["", "   "])
    def test_empty_image_rejected(self, image):
        with pytest.raises(ValidationError):
            ContainerSpec(image=image, mount="/tmp")

    def test_empty_mount_rejected(self):
        with pytest.raises(ValidationError):
            ContainerSpec(image="jupyter/base-notebook", mount="")


class TestContainerHandle:
    """Tests for ContainerHandle"""

    def test_new_handle_is_absent(self):
        handle = ContainerHandle(container_id="abc")

        assert handle.phase == ContainerPhase.ABSENT
        assert handle.statuses == {}

    def test_advance_records_status(self):
        handle = ContainerHandle(container_id="abc")

        handle.advance(ContainerPhase.CREATED, 201)
        handle.advance(ContainerPhase.STARTED, 204)

        assert handle.phase == ContainerPhase.STARTED
        assert handle.statuses == {ContainerPhase.CREATED: 201, ContainerPhase.STARTED: 204}

    def test_short_id(self):
        handle = ContainerHandle(container_id="0123456789abcdef0123")

        assert handle.short_id == "0123456789ab"


class TestTransitions:
    """Tests for the lifecycle transition table"""

    def test_no_transition_leaves_killed(self):
        for allowed, _ in TRANSITIONS.values():
            assert ContainerPhase.KILLED not in allowed

    def test_no_transition_from_absent(self):
        for allowed, _ in TRANSITIONS.values():
            assert ContainerPhase.ABSENT not in allowed

    def test_attach_requires_started(self):
        allowed, target = TRANSITIONS["attach"]

        assert allowed == frozenset({ContainerPhase.STARTED})
        assert target == ContainerPhase.ATTACHED

    def test_remove_only_before_start(self):
        allowed, target = TRANSITIONS["remove"]

        assert allowed == frozenset({ContainerPhase.CREATED})
        assert target == ContainerPhase.ABSENT
