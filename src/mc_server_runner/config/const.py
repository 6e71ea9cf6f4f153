# mc_server_runner/config/const.py
from importlib.metadata import version, PackageNotFoundError

# --- Package Constants ---
package_name = "mc-server-runner"
executable_name = package_name
app_name_title = package_name.replace("-", " ").title()
app_author = "mc-server-runner"

# --- Files inside the server directory ---
CONFIG_FILE_NAME = f"{package_name}.conf"
VERSION_FILE_NAME = "current_version.txt"
EULA_FILE_NAME = "eula.txt"
SERVER_PROPERTIES_FILE_NAME = "server.properties"
PLUGINS_DIR_NAME = "plugins"
SERVER_LOGS_DIR_NAME = "logs"

SYSTEM_CONFIG_PATH = f"/etc/{CONFIG_FILE_NAME}"

# --- Upstream locations ---
PAPERMC_API_BASE = "https://api.papermc.io/v2"
BUILD_TOOLS_JAR_URL = "https://hub.spigotmc.org/jenkins/job/BuildTools/lastSuccessfulBuild/artifact/target/BuildTools.jar"
USER_AGENT = f"{package_name}/{{version}}"

# --- Defaults ---
SPIGOT_BASELINE_VERSION = "1.20.1"
DEFAULT_STOP_GRACE_SECONDS = 2.0
DEFAULT_LOG_KEEP = 3
MINECRAFT_PORT = 25565


def get_installed_version() -> str:
    try:
        installed_version = version(package_name)
        return installed_version
    except PackageNotFoundError:
        installed_version = "0.0.0"
        return installed_version
