from typing import Dict, Optional

import pyvisa
from loguru import logger


def list_visa_devices(
    filter_string: Optional[str] = None,
    model_filter: Optional[str] = None,
    resource_manager: Optional[pyvisa.ResourceManager] = None,
    timeout: float = 2.0,
) -> Dict[str, Dict[str, str]]:
    """List available VISA devices and query their identification.

    Args:
        filter_string: Optional string to filter resources (e.g., "USB" or "GPIB")
        model_filter: Optional string to filter devices by IDN contents
        resource_manager: Optional ResourceManager to use. If None, creates one
        timeout: Per-device query timeout in seconds

    Returns:
        Dictionary mapping VISA addresses to info dictionaries containing:
        - idn: Identification string (empty if the query failed)
        - status: 'connected' or 'error'
        - error: Error message if the query failed
    """
    owns_rm = False
    if resource_manager is None:
        resource_manager = pyvisa.ResourceManager()
        owns_rm = True

    try:
        devices = {}
        for resource in resource_manager.list_resources():
            if filter_string and filter_string not in resource:
                continue

            device_info = {"idn": "", "status": "unknown", "error": ""}
            inst = None
            try:
                inst = resource_manager.open_resource(resource)
                inst.timeout = int(timeout * 1000)
                idn = inst.query("*IDN?").strip()
                if model_filter and model_filter not in idn:
                    continue
                device_info["idn"] = idn
                device_info["status"] = "connected"
                logger.debug(f"Found device at {resource}: {idn}")
            except (pyvisa.VisaIOError, ValueError) as e:
                device_info["status"] = "error"
                device_info["error"] = str(e)
                logger.debug(f"Error with resource {resource}: {str(e)}")
            finally:
                if inst is not None:
                    try:
                        inst.close()
                    except pyvisa.VisaIOError:
                        logger.trace(f"Could not close {resource}")
            devices[resource] = device_info
        return devices
    finally:
        if owns_rm:
            resource_manager.close()
