"""Id-mapping policy from hub nodes and attributes to host objects."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Final

from .codecs.homee_models import HubAttribute, HubNode
from .const import UNIT_UNIX_TIMESTAMP
from .domain.coercion import ValueType
from .domain.ids import attribute_segment, device_id


@dataclass(frozen=True, slots=True)
class AttributeProfile:
    """Host-side description of a hub attribute type."""

    label: str
    value_type: ValueType
    role: str


_BOOL = ValueType.BOOLEAN
_NUM = ValueType.NUMBER
_STR = ValueType.STRING

# Keyed by the lower-case hub attribute type name.
ATTRIBUTE_PROFILES: Final[Mapping[str, AttributeProfile]] = {
    "onoff": AttributeProfile("OnOff", _BOOL, "switch"),
    "dimminglevel": AttributeProfile("DimmingLevel", _NUM, "level.dimmer"),
    "currentenergyuse": AttributeProfile("CurrentEnergyUse", _NUM, "value.power"),
    "accumulatedenergyuse": AttributeProfile(
        "AccumulatedEnergyUse", _NUM, "value.power.consumption"
    ),
    "temperature": AttributeProfile("Temperature", _NUM, "value.temperature"),
    "targettemperature": AttributeProfile(
        "TargetTemperature", _NUM, "level.temperature"
    ),
    "relativehumidity": AttributeProfile("RelativeHumidity", _NUM, "value.humidity"),
    "batterylevel": AttributeProfile("BatteryLevel", _NUM, "value.battery"),
    "statusled": AttributeProfile("StatusLED", _BOOL, "switch"),
    "windowposition": AttributeProfile("WindowPosition", _NUM, "value.window"),
    "brightness": AttributeProfile("Brightness", _NUM, "value.brightness"),
    "floodalarm": AttributeProfile("FloodAlarm", _BOOL, "sensor.alarm.flood"),
    "siren": AttributeProfile("Siren", _BOOL, "switch"),
    "openclose": AttributeProfile("OpenClose", _BOOL, "sensor.window"),
    "position": AttributeProfile("Position", _NUM, "level.blind"),
    "smokealarm": AttributeProfile("SmokeAlarm", _BOOL, "sensor.alarm.fire"),
    "blackoutalarm": AttributeProfile("BlackoutAlarm", _BOOL, "sensor.alarm.power"),
    "currentvalveposition": AttributeProfile(
        "CurrentValvePosition", _NUM, "value.valve"
    ),
    "binaryinput": AttributeProfile("BinaryInput", _BOOL, "sensor"),
    "co2level": AttributeProfile("CO2Level", _NUM, "value.co2"),
    "pressure": AttributeProfile("Pressure", _NUM, "value.pressure"),
    "motionalarm": AttributeProfile("MotionAlarm", _BOOL, "sensor.motion"),
    "softwarerevision": AttributeProfile("SoftwareRevision", _STR, "text"),
    "firmwarerevision": AttributeProfile("FirmwareRevision", _STR, "text"),
    "lastupdate": AttributeProfile("LastUpdate", _NUM, "date"),
}

# Numeric attribute type codes used on the hub wire.
ATTRIBUTE_TYPE_NAMES: Final[Mapping[int, str]] = {
    1: "onoff",
    2: "dimminglevel",
    3: "currentenergyuse",
    4: "accumulatedenergyuse",
    5: "temperature",
    6: "targettemperature",
    7: "relativehumidity",
    8: "batterylevel",
    9: "statusled",
    10: "windowposition",
    11: "brightness",
    12: "floodalarm",
    13: "siren",
    14: "openclose",
    15: "position",
    16: "smokealarm",
    17: "blackoutalarm",
    18: "currentvalveposition",
    19: "binaryinput",
    20: "co2level",
    21: "pressure",
    25: "motionalarm",
}


def attribute_type_name(attribute_type: int | str) -> str | None:
    """Return the lower-case type name for a numeric or named hub type."""

    if isinstance(attribute_type, int):
        return ATTRIBUTE_TYPE_NAMES.get(attribute_type)
    text = str(attribute_type).strip().lower()
    if text.isdigit():
        return ATTRIBUTE_TYPE_NAMES.get(int(text))
    return text or None


class AttributeMapper:
    """Derive host ids and state metadata from hub descriptors."""

    def __init__(
        self, profiles: Mapping[str, AttributeProfile] | None = None
    ) -> None:
        self._profiles = dict(ATTRIBUTE_PROFILES if profiles is None else profiles)

    def device_id(self, node: HubNode) -> str:
        """Return the host device id for ``node``."""

        return device_id(node.id)

    def device_name(self, node: HubNode) -> str:
        """Return the display name for ``node``, falling back to its profile."""

        if node.name:
            return node.name
        if node.profile is not None:
            return f"{node.profile} {node.id}"
        return f"Node {node.id}"

    def profile_for(self, attribute: HubAttribute) -> AttributeProfile | None:
        """Return the profile for ``attribute`` or None when unknown."""

        name = attribute_type_name(attribute.type)
        if name is None:
            return None
        return self._profiles.get(name)

    def map_attribute(
        self, node_name: str, attribute: HubAttribute
    ) -> dict[str, Any] | None:
        """Return state ``common`` metadata (with ``id``) or None when unmappable."""

        profile = self.profile_for(attribute)
        if profile is None:
            return None

        common: dict[str, Any] = {
            "id": attribute_segment(attribute.id),
            "name": f"{node_name} {profile.label}".strip(),
            "type": profile.value_type.value,
            "role": profile.role,
            "read": True,
            "write": attribute.editable and profile.value_type is not ValueType.STRING,
        }
        unit = attribute.unit
        if unit == UNIT_UNIX_TIMESTAMP:
            common["role"] = "date"
        elif unit and unit not in {"n/a", "text"}:
            common["unit"] = unit
        if profile.value_type is ValueType.NUMBER:
            if attribute.minimum is not None:
                common["min"] = attribute.minimum
            if attribute.maximum is not None:
                common["max"] = attribute.maximum
        return common


__all__ = [
    "ATTRIBUTE_PROFILES",
    "ATTRIBUTE_TYPE_NAMES",
    "AttributeMapper",
    "AttributeProfile",
    "attribute_type_name",
]
