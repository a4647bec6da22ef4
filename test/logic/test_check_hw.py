from unittest.mock import MagicMock

import pyvisa

from labsweep.util import list_visa_devices


def make_rm(replies):
    rm = MagicMock()
    rm.list_resources.return_value = tuple(replies)

    def open_resource(addr):
        inst = MagicMock()
        reply = replies[addr]
        if isinstance(reply, Exception):
            inst.query.side_effect = reply
        else:
            inst.query.return_value = reply
        return inst

    rm.open_resource.side_effect = open_resource
    return rm


class TestListVisaDevices:
    def test_lists_and_identifies(self):
        rm = make_rm(
            {
                "USB0::0x1::INSTR": "ACME,SA1000,1,1.0\n",
                "GPIB0::18::INSTR": pyvisa.VisaIOError(
                    pyvisa.constants.StatusCode.error_timeout
                ),
            }
        )
        devices = list_visa_devices(resource_manager=rm)
        assert devices["USB0::0x1::INSTR"]["idn"] == "ACME,SA1000,1,1.0"
        assert devices["USB0::0x1::INSTR"]["status"] == "connected"
        assert devices["GPIB0::18::INSTR"]["status"] == "error"
        assert devices["GPIB0::18::INSTR"]["error"]
        # shared resource manager stays open
        rm.close.assert_not_called()

    def test_filters(self):
        rm = make_rm(
            {
                "USB0::0x1::INSTR": "ACME,SA1000",
                "USB0::0x2::INSTR": "ACME,PG20",
                "TCPIP0::10.0.0.5::INSTR": "ACME,SA2000",
            }
        )
        assert list(list_visa_devices(filter_string="USB", resource_manager=rm)) == [
            "USB0::0x1::INSTR",
            "USB0::0x2::INSTR",
        ]
        assert list(list_visa_devices(model_filter="SA", resource_manager=rm)) == [
            "USB0::0x1::INSTR",
            "TCPIP0::10.0.0.5::INSTR",
        ]
