"""
Built-in definitions for the Linear SOCEXCITER (EC710LP) exciter.

All OIDs live under enterprises.linear.ec710lp (1.3.6.1.4.1.25026.7):
- .1.2.1  RF power measurements
- .1.2.3  Power supply measurements
- .1.2.4  Satellite tuner measurements
- .1.2.5  Power amplifier measurements
- .1.3.1  Alarm flags (1 = active)

Power, temperature, current and voltage values are reported in hundredths
of their unit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from excitermon.models.records import (
    AlarmDefinition,
    AlarmType,
    EnumRule,
    MeasurementDefinition,
    MeasurementType,
    ScaleRule,
    Severity,
)
from excitermon.protocol.constants import SnmpConstants

if TYPE_CHECKING:
    from excitermon.catalog.registry import CatalogBuilder


_BASE: Final[str] = SnmpConstants.BASE_OID

HUNDREDTHS: Final = ScaleRule(factor=0.01)
"""Raw value is in hundredths of the display unit."""

TUNER_LOCK_LABELS: Final = EnumRule(labels={0: "Unlocked", 1: "Locked"})


MEASUREMENTS: Final[tuple[MeasurementDefinition, ...]] = (
    # ===== RF Power =====
    MeasurementDefinition(
        key="programmedPower",
        oid=f"{_BASE}.1.2.1.1.0",
        name="Programmed Power",
        unit="W",
        description="Programmed RF output power",
        type=MeasurementType.POWER,
        rule=HUNDREDTHS,
    ),
    MeasurementDefinition(
        key="forwardPower",
        oid=f"{_BASE}.1.2.1.2.0",
        name="Forward Power",
        unit="W",
        description="Total RF power measured at the output",
        type=MeasurementType.POWER,
        rule=HUNDREDTHS,
    ),
    MeasurementDefinition(
        key="reflectedPower",
        oid=f"{_BASE}.1.2.1.3.0",
        name="Reflected Power",
        unit="W",
        description="RF power reflected back into the output",
        type=MeasurementType.POWER,
        rule=HUNDREDTHS,
    ),
    # ===== Power Supplies =====
    MeasurementDefinition(
        key="powerSupply1_50v",
        oid=f"{_BASE}.1.2.3.1.0",
        name="PSU 1 Voltage",
        unit="V",
        description="50 V rail of power supply 1",
        type=MeasurementType.VOLTAGE,
        rule=HUNDREDTHS,
    ),
    MeasurementDefinition(
        key="powerSupply2_50v",
        oid=f"{_BASE}.1.2.3.2.0",
        name="PSU 2 Voltage",
        unit="V",
        description="50 V rail of power supply 2",
        type=MeasurementType.VOLTAGE,
        rule=HUNDREDTHS,
    ),
    MeasurementDefinition(
        key="psu1Current",
        oid=f"{_BASE}.1.2.3.3.0",
        name="PSU 1 Current",
        unit="A",
        description="Current delivered by power supply 1",
        type=MeasurementType.CURRENT,
        rule=HUNDREDTHS,
    ),
    MeasurementDefinition(
        key="psu2Current",
        oid=f"{_BASE}.1.2.3.4.0",
        name="PSU 2 Current",
        unit="A",
        description="Current delivered by power supply 2",
        type=MeasurementType.CURRENT,
        rule=HUNDREDTHS,
    ),
    # ===== Satellite Tuner =====
    MeasurementDefinition(
        key="satelliteTunerStatus",
        oid=f"{_BASE}.1.2.4.1.0",
        name="Satellite Tuner",
        unit="",
        description="Satellite receiver lock state",
        type=MeasurementType.STATUS,
        rule=TUNER_LOCK_LABELS,
    ),
    MeasurementDefinition(
        key="satelliteTunerSnr",
        oid=f"{_BASE}.1.2.4.2.0",
        name="Satellite SNR",
        unit="dB",
        description="Signal-to-noise ratio of the satellite input",
        type=MeasurementType.SIGNAL,
        rule=HUNDREDTHS,
    ),
    # ===== Power Amplifier =====
    MeasurementDefinition(
        key="paCurrent",
        oid=f"{_BASE}.1.2.5.1.0",
        name="PA Current",
        unit="A",
        description="Current drawn by the power amplifier",
        type=MeasurementType.CURRENT,
        rule=HUNDREDTHS,
    ),
    MeasurementDefinition(
        key="paTemperature",
        oid=f"{_BASE}.1.2.5.2.0",
        name="PA Temperature",
        unit="°C",
        description="Power amplifier temperature",
        type=MeasurementType.TEMPERATURE,
        rule=HUNDREDTHS,
    ),
)


ALARMS: Final[tuple[AlarmDefinition, ...]] = (
    # ===== System =====
    AlarmDefinition(
        key="fpgaCommun",
        oid=f"{_BASE}.1.3.1.1.0",
        name="FPGA Communication",
        description="Controller lost communication with the FPGA",
        severity=Severity.CRITICAL,
        type=AlarmType.SYSTEM,
    ),
    AlarmDefinition(
        key="clockLockFail",
        oid=f"{_BASE}.1.3.1.10.0",
        name="Clock Lock Failure",
        description="Reference clock is not locked",
        severity=Severity.CRITICAL,
        type=AlarmType.SYSTEM,
    ),
    # ===== RF Power =====
    AlarmDefinition(
        key="outputPowerZero",
        oid=f"{_BASE}.1.3.1.27.0",
        name="Output Power Zero",
        description="RF power is programmed but no output is measured",
        severity=Severity.CRITICAL,
        type=AlarmType.POWER,
    ),
    AlarmDefinition(
        key="reducedPower",
        oid=f"{_BASE}.1.3.1.53.0",
        name="Reduced Power",
        description="Output reduced because of reflected power or SFN failure",
        severity=Severity.WARNING,
        type=AlarmType.POWER,
    ),
    AlarmDefinition(
        key="reflectedPowerError",
        oid=f"{_BASE}.1.3.1.58.0",
        name="Reflected Power Error",
        description="Reflected power measurement failed",
        severity=Severity.WARNING,
        type=AlarmType.POWER,
    ),
    # ===== Temperature / Cooling =====
    AlarmDefinition(
        key="paTemperature",
        oid=f"{_BASE}.1.3.1.34.0",
        name="PA Temperature High",
        description="Power amplifier above 75 °C",
        severity=Severity.WARNING,
        type=AlarmType.TEMPERATURE,
    ),
    AlarmDefinition(
        key="superCriticalPaTemperature",
        oid=f"{_BASE}.1.3.1.35.0",
        name="PA Temperature Critical",
        description="Power amplifier above the shutdown threshold",
        severity=Severity.CRITICAL,
        type=AlarmType.TEMPERATURE,
    ),
    AlarmDefinition(
        key="paFanFail",
        oid=f"{_BASE}.1.3.1.36.0",
        name="PA Fan Failure",
        description="Power amplifier cooling fan stopped",
        severity=Severity.WARNING,
        type=AlarmType.COOLING,
    ),
    # ===== Power Supplies =====
    AlarmDefinition(
        key="psu1CommFail",
        oid=f"{_BASE}.1.3.1.40.0",
        name="PSU 1 Communication",
        description="No communication with power supply 1",
        severity=Severity.CRITICAL,
        type=AlarmType.POWER_SUPPLY,
    ),
    AlarmDefinition(
        key="psu2CommFail",
        oid=f"{_BASE}.1.3.1.41.0",
        name="PSU 2 Communication",
        description="No communication with power supply 2",
        severity=Severity.CRITICAL,
        type=AlarmType.POWER_SUPPLY,
    ),
    AlarmDefinition(
        key="psu1HighCurrent",
        oid=f"{_BASE}.1.3.1.42.0",
        name="PSU 1 High Current",
        description="Power supply 1 current above limit",
        severity=Severity.WARNING,
        type=AlarmType.POWER_SUPPLY,
    ),
    AlarmDefinition(
        key="psu2HighCurrent",
        oid=f"{_BASE}.1.3.1.43.0",
        name="PSU 2 High Current",
        description="Power supply 2 current above limit",
        severity=Severity.WARNING,
        type=AlarmType.POWER_SUPPLY,
    ),
    AlarmDefinition(
        key="v50EqpFail",
        oid=f"{_BASE}.1.3.1.45.0",
        name="50 V Failure",
        description="50 V equipment rail out of range",
        severity=Severity.CRITICAL,
        type=AlarmType.VOLTAGE,
    ),
)


CRITICAL_MEASUREMENTS: Final[tuple[str, ...]] = (
    "forwardPower",
    "reflectedPower",
    "paTemperature",
    "paCurrent",
    "powerSupply1_50v",
    "powerSupply2_50v",
    "satelliteTunerStatus",
    "satelliteTunerSnr",
)

CRITICAL_ALARMS: Final[tuple[str, ...]] = (
    "outputPowerZero",
    "superCriticalPaTemperature",
    "paTemperature",
    "psu1CommFail",
    "psu2CommFail",
    "clockLockFail",
    "v50EqpFail",
    "fpgaCommun",
)


def register_socexciter(builder: CatalogBuilder) -> None:
    """
    Register every SOCEXCITER definition and critical key with a builder.

    Args:
        builder: The CatalogBuilder to populate.
    """
    for measurement in MEASUREMENTS:
        builder.register_measurement(measurement)
    for alarm in ALARMS:
        builder.register_alarm(alarm)

    builder.mark_critical_measurements(*CRITICAL_MEASUREMENTS)
    builder.mark_critical_alarms(*CRITICAL_ALARMS)
