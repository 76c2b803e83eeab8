import pytest

from dbsampler_adapter_sdk import ConnectionOptions
from dbsampler_adapter_sdk.testing import AdapterComplianceSuite
from dbsampler_mock import MockAdapter


class TestMockCompliance(AdapterComplianceSuite):
    @pytest.fixture
    def adapter(self):
        return MockAdapter(fail_pattern="missing_table")

    @pytest.fixture
    def connection(self, adapter):
        return adapter.connect(ConnectionOptions())
