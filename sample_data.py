import logging
from dataclasses import dataclass, field
from typing import List, Optional

from database import ComponentLibraryDB
from errors import LibraryError

logger = logging.getLogger(__name__)


def _specs(*rows):
    return [{"parameter": p, "value": v, "unit": u} for p, v, u in rows]


SAMPLE_COMPONENTS = [
    {
        "name": "ATmega328P",
        "category": "microcontrollers",
        "package": "TQFP-32",
        "value": "ATmega328P-AU",
        "description": "8-bit AVR microcontroller with 32KB Flash, 2KB SRAM, and 1KB EEPROM",
        "manufacturer": "Microchip Technology",
        "datasheet": "https://www.microchip.com/wwwproducts/en/ATmega328P",
        "tags": ["arduino", "avr", "8-bit", "microcontroller"],
        "specifications": _specs(
            ("Flash Memory", "32", "KB"),
            ("SRAM", "2", "KB"),
            ("EEPROM", "1", "KB"),
            ("Operating Voltage", "1.8-5.5", "V"),
            ("Max Clock Frequency", "20", "MHz"),
            ("I/O Pins", "23", ""),
            ("ADC Channels", "8", ""),
            ("PWM Channels", "6", ""),
        ),
    },
    {
        "name": "LM358",
        "category": "op-amps",
        "package": "SOIC-8",
        "value": "LM358D",
        "description": "Dual operational amplifier with wide supply voltage range",
        "manufacturer": "Texas Instruments",
        "datasheet": "https://www.ti.com/product/LM358",
        "tags": ["op-amp", "dual", "general-purpose"],
        "specifications": _specs(
            ("Supply Voltage", "3-32", "V"),
            ("Input Offset Voltage", "2", "mV"),
            ("Gain Bandwidth Product", "1.1", "MHz"),
            ("Slew Rate", "0.3", "V/µs"),
            ("Common Mode Rejection Ratio", "85", "dB"),
            ("Operating Temperature", "-40 to +85", "°C"),
        ),
    },
    {
        "name": "ESP32-WROOM-32",
        "category": "microcontrollers",
        "package": "Module",
        "value": "ESP32-WROOM-32",
        "description": "WiFi + Bluetooth module with dual-core Xtensa LX6 MCU",
        "manufacturer": "Espressif Systems",
        "datasheet": "https://www.espressif.com/sites/default/files/documentation/esp32-wroom-32_datasheet_en.pdf",
        "tags": ["wifi", "bluetooth", "iot", "dual-core", "32-bit"],
        "specifications": _specs(
            ("CPU", "Dual-core Xtensa LX6", ""),
            ("Clock Frequency", "240", "MHz"),
            ("Flash Memory", "4", "MB"),
            ("SRAM", "520", "KB"),
            ("WiFi Standards", "802.11 b/g/n", ""),
            ("Bluetooth", "v4.2 BR/EDR and BLE", ""),
            ("GPIO Pins", "34", ""),
            ("Operating Voltage", "3.0-3.6", "V"),
        ),
    },
    {
        "name": "1N4007",
        "category": "diodes",
        "package": "DO-41",
        "value": "1N4007",
        "description": "General purpose silicon rectifier diode",
        "manufacturer": "Various",
        "datasheet": "",
        "tags": ["rectifier", "general-purpose", "silicon"],
        "specifications": _specs(
            ("Peak Repetitive Reverse Voltage", "1000", "V"),
            ("Average Forward Current", "1", "A"),
            ("Forward Voltage Drop", "1.1", "V"),
            ("Reverse Recovery Time", "30", "µs"),
            ("Operating Temperature", "-65 to +175", "°C"),
        ),
    },
    {
        "name": "2N2222A",
        "category": "transistors",
        "package": "TO-92",
        "value": "2N2222A",
        "description": "NPN general purpose transistor",
        "manufacturer": "Various",
        "datasheet": "",
        "tags": ["npn", "general-purpose", "switching"],
        "specifications": _specs(
            ("Collector-Emitter Voltage", "40", "V"),
            ("Collector Current", "800", "mA"),
            ("Current Gain (hFE)", "100-300", ""),
            ("Transition Frequency", "250", "MHz"),
            ("Power Dissipation", "625", "mW"),
            ("Operating Temperature", "-65 to +200", "°C"),
        ),
    },
    {
        "name": "AMS1117-3.3",
        "category": "voltage-regulators",
        "package": "SOT-223",
        "value": "AMS1117-3.3",
        "description": "Low dropout linear voltage regulator, 3.3V output",
        "manufacturer": "Advanced Monolithic Systems",
        "datasheet": "",
        "tags": ["ldo", "linear", "3.3v", "regulator"],
        "specifications": _specs(
            ("Output Voltage", "3.3", "V"),
            ("Input Voltage", "4.5-15", "V"),
            ("Output Current", "1", "A"),
            ("Dropout Voltage", "1.3", "V"),
            ("Line Regulation", "2", "mV"),
            ("Load Regulation", "5", "mV"),
            ("Operating Temperature", "-40 to +125", "°C"),
        ),
    },
    {
        "name": "HC-SR04",
        "category": "sensors",
        "package": "Module",
        "value": "HC-SR04",
        "description": "Ultrasonic distance sensor module",
        "manufacturer": "Various",
        "datasheet": "",
        "tags": ["ultrasonic", "distance", "sensor", "module"],
        "specifications": _specs(
            ("Operating Voltage", "5", "V"),
            ("Operating Current", "15", "mA"),
            ("Ranging Distance", "2-400", "cm"),
            ("Resolution", "0.3", "cm"),
            ("Measuring Angle", "15", "°"),
            ("Trigger Input Pulse", "10", "µs"),
            ("Operating Temperature", "-15 to +70", "°C"),
        ),
    },
    {
        "name": "74HC595",
        "category": "logic",
        "package": "SOIC-16",
        "value": "74HC595D",
        "description": "8-bit serial-in, serial or parallel-out shift register",
        "manufacturer": "Various",
        "datasheet": "",
        "tags": ["shift-register", "serial", "parallel", "cmos"],
        "specifications": _specs(
            ("Supply Voltage", "2-6", "V"),
            ("Output Current", "7.5", "mA"),
            ("Propagation Delay", "13", "ns"),
            ("Clock Frequency", "25", "MHz"),
            ("Operating Temperature", "-40 to +85", "°C"),
        ),
    },
]


@dataclass
class SeedResult:
    """Outcome of a seeding run: names that were added and names that failed."""
    added: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


def initialize_sample_data(db: ComponentLibraryDB, user_id: Optional[str],
                           samples: Optional[list] = None) -> SeedResult:
    """
    Insert the sample components one by one.

    Seeding is best effort: a record the store rejects is logged and listed
    in SeedResult.failed, and the remaining records are still inserted.

    Args:
        db: Store to seed
        user_id: Owner of the sample components
        samples: Records to insert (defaults to SAMPLE_COMPONENTS)

    Returns:
        SeedResult with the added and failed component names
    """
    result = SeedResult()
    logger.info("Initializing sample component data...")

    for record in SAMPLE_COMPONENTS if samples is None else samples:
        try:
            db.add_component(record, user_id)
        except LibraryError as e:
            logger.warning("Failed to add sample component %s: %s", record["name"], e)
            result.failed.append(record["name"])
        else:
            logger.debug("Added sample component: %s", record["name"])
            result.added.append(record["name"])

    logger.info("Sample data initialization complete: %d added, %d failed",
                len(result.added), len(result.failed))
    return result
