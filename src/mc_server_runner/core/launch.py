# mc_server_runner/core/launch.py
"""JVM flag tables and the server launch command."""

from typing import List, Optional

from .flavor import Flavor

# Aikar's G1 tuning, shared by Paper, Folia and Spigot.
AIKAR_FLAGS = (
    "-XX:+UseG1GC",
    "-XX:+ParallelRefProcEnabled",
    "-XX:MaxGCPauseMillis=200",
    "-XX:+UnlockExperimentalVMOptions",
    "-XX:+DisableExplicitGC",
    "-XX:+AlwaysPreTouch",
    "-XX:G1NewSizePercent=30",
    "-XX:G1MaxNewSizePercent=40",
    "-XX:G1HeapRegionSize=8M",
    "-XX:G1ReservePercent=20",
    "-XX:G1HeapWastePercent=5",
    "-XX:G1MixedGCCountTarget=4",
    "-XX:InitiatingHeapOccupancyPercent=15",
    "-XX:G1MixedGCLiveThresholdPercent=90",
    "-XX:G1RSetUpdatingPauseTimePercent=5",
    "-XX:SurvivorRatio=32",
    "-XX:+PerfDisableSharedMem",
    "-XX:MaxTenuringThreshold=1",
    "-Dusing.aikars.flags=https://mcflags.emc.gs",
    "-Daikars.new.flags=true",
)

VELOCITY_FLAGS = (
    "-XX:+AlwaysPreTouch",
    "-XX:+ParallelRefProcEnabled",
    "-XX:+UnlockExperimentalVMOptions",
    "-XX:+UseG1GC",
    "-XX:G1HeapRegionSize=4M",
    "-XX:MaxInlineLevel=15",
)

# Java 8 style GC logging.
LEGACY_GC_LOGGING_FLAGS = (
    "-Xloggc:gc.log",
    "-verbose:gc",
    "-XX:+PrintGCDetails",
    "-XX:+PrintGCDateStamps",
    "-XX:+PrintGCTimeStamps",
    "-XX:+UseGCLogFileRotation",
    "-XX:NumberOfGCLogFiles=5",
    "-XX:GCLogFileSize=1M",
)

# Unified logging, Java 11+.
UNIFIED_GC_LOGGING_FLAGS = ("-Xlog:gc*:logs/gc.log:time,uptime:filecount=5,filesize=1M",)


def gc_logging_flags(java_major_version: Optional[int]) -> List[str]:
    """GC logging flags for the JVM, or none when its version is unknown."""
    if java_major_version is None:
        return []
    if java_major_version < 11:
        return list(LEGACY_GC_LOGGING_FLAGS)
    return list(UNIFIED_GC_LOGGING_FLAGS)


def server_flags(
    flavor: Flavor, xms: str, xmx: str, java_major_version: Optional[int]
) -> List[str]:
    """Heap sizes followed by the flavor's tuning and logging flags."""
    flags = [f"-Xms{xms}", f"-Xmx{xmx}"]
    if flavor.is_proxy:
        flags.extend(VELOCITY_FLAGS)
    else:
        flags.extend(AIKAR_FLAGS)
        flags.extend(gc_logging_flags(java_major_version))
    return flags


def extra_args(flavor: Flavor) -> List[str]:
    return [] if flavor.is_proxy else ["--nogui"]


def build_launch_command(
    java_cmd: str,
    flavor: Flavor,
    jar_path: str,
    xms: str,
    xmx: str,
    java_major_version: Optional[int],
) -> List[str]:
    """Returns the full argv that starts the server jar."""
    return [
        java_cmd,
        *server_flags(flavor, xms, xmx, java_major_version),
        "-jar",
        jar_path,
        *extra_args(flavor),
    ]
