"""Google Home device operations.

HomeGraph request/response mapping is not wired up yet: each operation
returns a description of what would be sent for the validated arguments.
The credential is held so a HomeGraph client can be built from it.
"""

from google.oauth2.credentials import Credentials

ALL_DEVICES = "all devices"


def _describe_targets(devices: list[str] | None) -> str:
    return ", ".join(devices) if devices else ALL_DEVICES


class HomeGraphDevices:
    """Device operations bound to an authenticated Google credential.

    Attributes:
        credentials: Google OAuth2 credential for HomeGraph requests.
    """

    def __init__(self, credentials: Credentials) -> None:
        self.credentials = credentials

    def list_devices(self) -> str:
        return "Device listing would be implemented here"

    def execute_command(self, command: str, devices: list[str] | None = None) -> str:
        return f'Command "{command}" would be executed on devices: {_describe_targets(devices)}'

    def query_devices(self, devices: list[str] | None = None) -> str:
        return f"Querying devices: {_describe_targets(devices)}"

    def get_device_states(self, device_ids: list[str]) -> str:
        return f"Getting states for devices: {', '.join(device_ids)}"
