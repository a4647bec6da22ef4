from unittest.mock import MagicMock

import numpy as np
import pytest
import pyvisa

from labsweep.device import TraceConnection, VisaConnection
from labsweep.types import ProtocolError, TransportError


def visa_timeout():
    return pyvisa.VisaIOError(pyvisa.constants.StatusCode.error_timeout)


@pytest.fixture
def resource():
    res = MagicMock()
    res.timeout = 2000
    return res


class TestVisaConnection:
    def test_configures_given_resource(self, resource):
        conn = VisaConnection("TEST::INSTR", timeout=3.0, resource=resource)
        assert conn.is_open()
        assert resource.timeout == 3000
        assert resource.read_termination == "\n"
        assert resource.write_termination == "\n"

    def test_open_via_resource_manager(self, resource):
        rm = MagicMock()
        rm.open_resource.return_value = resource
        conn = VisaConnection("TEST::INSTR", resource_manager=rm)
        assert not conn.is_open()
        conn.open()
        rm.open_resource.assert_called_once_with("TEST::INSTR")
        assert conn.is_open()
        conn.close()
        resource.close.assert_called_once()
        # shared resource manager is not ours to close
        rm.close.assert_not_called()

    def test_open_failure_is_transport_error(self):
        rm = MagicMock()
        rm.open_resource.side_effect = visa_timeout()
        conn = VisaConnection("TEST::INSTR", resource_manager=rm)
        with pytest.raises(TransportError):
            conn.open()

    def test_not_open_is_transport_error(self):
        conn = VisaConnection("TEST::INSTR")
        with pytest.raises(TransportError):
            conn.query("*IDN?")

    def test_query_strips_reply(self, resource):
        resource.query.return_value = " ACME,SA1000,123,1.0\r\n"
        conn = VisaConnection("TEST::INSTR", resource=resource)
        assert conn.query("*IDN?") == "ACME,SA1000,123,1.0"

    def test_io_errors_are_transport_errors(self, resource):
        resource.query.side_effect = visa_timeout()
        resource.write.side_effect = visa_timeout()
        resource.read.side_effect = visa_timeout()
        conn = VisaConnection("TEST::INSTR", resource=resource)
        with pytest.raises(TransportError):
            conn.query("SENS:SWE:POIN?")
        with pytest.raises(TransportError):
            conn.write("INIT:IMM")
        with pytest.raises(TransportError):
            conn.read()

    def test_query_timeout_is_restored(self, resource):
        resource.query.return_value = "1"
        conn = VisaConnection("TEST::INSTR", timeout=2.0, resource=resource)
        conn.query("*OPC?", timeout=30)
        assert resource.timeout == 2000

    def test_query_int(self, resource):
        conn = VisaConnection("TEST::INSTR", resource=resource)
        resource.query.return_value = "601"
        assert conn.query_int("SENS:SWE:POIN?") == 601
        resource.query.return_value = "+1.001E+03"
        assert conn.query_int("SENS:SWE:POIN?") == 1001

    @pytest.mark.parametrize("reply", ["", "abc", "10.5"])
    def test_query_int_unparsable(self, resource, reply):
        resource.query.return_value = reply
        conn = VisaConnection("TEST::INSTR", resource=resource)
        with pytest.raises(ProtocolError):
            conn.query_int("SENS:SWE:POIN?")

    def test_query_floats(self, resource):
        resource.query.return_value = "-80.1,-79.5, -20.25,-81"
        conn = VisaConnection("TEST::INSTR", resource=resource)
        np.testing.assert_allclose(
            conn.query_floats("TRAC:DATA? TRACE1"), [-80.1, -79.5, -20.25, -81.0]
        )

    @pytest.mark.parametrize("reply", ["", "1.0,,2.0", "1.0,nope"])
    def test_query_floats_unparsable(self, resource, reply):
        resource.query.return_value = reply
        conn = VisaConnection("TEST::INSTR", resource=resource)
        with pytest.raises(ProtocolError) as exc_info:
            conn.query_floats("TRAC:DATA? TRACE1")
        assert exc_info.value.reply == reply


class TestTraceConnection:
    def test_records_exchanges(self, resource):
        resource.query.return_value = "101"
        conn = TraceConnection("TRACE::INSTR", resource=resource)
        conn.write("INIT:IMM")
        conn.query("SENS:SWE:POIN?")
        assert conn.log_index == 2
        assert conn.trace == [
            (0, "WRITE", "INIT:IMM"),
            (1, "QUERY", "SENS:SWE:POIN?"),
            (1, "REPLY", "101"),
        ]

    def test_logfile(self, resource, tmp_path):
        resource.query.return_value = "ACME,SA1000"
        logfile = tmp_path / "trace.log"
        conn = TraceConnection("TRACE2::INSTR", logfile=str(logfile), resource=resource)
        conn.query("*IDN?")
        conn.close()
        content = logfile.read_text()
        assert "QUERY '*IDN?'" in content
        assert "REPLY 'ACME,SA1000'" in content

    def test_failed_query_keeps_request(self, resource):
        resource.query.side_effect = [visa_timeout(), "ACME,SA1000"]
        conn = TraceConnection("TRACE3::INSTR", resource=resource)
        with pytest.raises(TransportError):
            conn.query("*IDN?")
        assert conn.trace == [(0, "QUERY", "*IDN?")]
        assert conn.log_index == 1
        conn.query("*IDN?")
        assert conn.trace[1:] == [(1, "QUERY", "*IDN?"), (1, "REPLY", "ACME,SA1000")]

    def test_failed_write_advances_index(self, resource):
        resource.write.side_effect = [visa_timeout(), None]
        conn = TraceConnection("TRACE4::INSTR", resource=resource)
        with pytest.raises(TransportError):
            conn.write("INIT:IMM")
        conn.write("INIT:IMM")
        assert [entry[0] for entry in conn.trace] == [0, 1]
        assert conn.log_index == 2
