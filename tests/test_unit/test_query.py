"""Unit tests for tool input models."""
import pytest
from pydantic import ValidationError

from postgres_mcp.tools.query import QueryDatabaseInput
from postgres_mcp.tools.schema import (
    DescribeTableInput,
    GetTableDataInput,
    IDENTIFIER_PATTERN,
    ListTablesInput,
)


class TestQueryInputValidation:
    def test_valid_query(self):
        params = QueryDatabaseInput(sql="SELECT 1")
        assert params.sql == "SELECT 1"
        assert params.params == []

    def test_whitespace_stripped(self):
        params = QueryDatabaseInput(sql="  SELECT 1 \n")
        assert params.sql == "SELECT 1"

    def test_empty_sql_rejected(self):
        with pytest.raises(ValidationError):
            QueryDatabaseInput(sql="")

    def test_blank_sql_rejected(self):
        with pytest.raises(ValidationError):
            QueryDatabaseInput(sql="   ")

    def test_params_accept_mixed_values(self):
        params = QueryDatabaseInput(sql="SELECT $1, $2, $3", params=["a", 2, None])
        assert params.params == ["a", 2, None]

    def test_params_must_be_a_list(self):
        with pytest.raises(ValidationError):
            QueryDatabaseInput(sql="SELECT $1", params="a")

    def test_frozen(self):
        params = QueryDatabaseInput(sql="SELECT 1")
        with pytest.raises(ValidationError):
            params.sql = "DROP TABLE weather_data"


class TestSchemaInputs:
    def test_list_tables_default_schema(self):
        assert ListTablesInput().schema_name == "public"

    def test_list_tables_schema_alias(self):
        params = ListTablesInput.model_validate({"schema": "weather"})
        assert params.schema_name == "weather"

    def test_describe_requires_table(self):
        with pytest.raises(ValidationError):
            DescribeTableInput.model_validate({})

    def test_describe_accepts_any_table_text(self):
        # Bound as a parameter, so no identifier restriction
        params = DescribeTableInput.model_validate({"table": "Weather Data"})
        assert params.table == "Weather Data"

    def test_table_data_defaults(self):
        params = GetTableDataInput.model_validate({"table": "weather_data"})
        assert params.schema_name == "public"
        assert params.limit == 10

    @pytest.mark.parametrize("limit", [0, -5])
    def test_table_data_limit_positive(self, limit):
        with pytest.raises(ValidationError):
            GetTableDataInput.model_validate({"table": "weather_data", "limit": limit})

    def test_table_data_integral_float_limit(self):
        params = GetTableDataInput.model_validate({"table": "weather_data", "limit": 5.0})
        assert params.limit == 5

    def test_table_data_fractional_limit_rejected(self):
        with pytest.raises(ValidationError):
            GetTableDataInput.model_validate({"table": "weather_data", "limit": 2.5})

    @pytest.mark.parametrize("limit", [True, False, "5", "ten"])
    def test_table_data_loose_limit_rejected(self, limit):
        with pytest.raises(ValidationError) as exc:
            GetTableDataInput.model_validate({"table": "weather_data", "limit": limit})
        assert exc.value.errors()[0]["loc"] == ("limit",)

    @pytest.mark.parametrize("name", ["weather_data", "_private", "Stations2", "t$1"])
    def test_identifier_accepted(self, name):
        assert GetTableDataInput.model_validate({"table": name}).table == name

    @pytest.mark.parametrize("name", ["", "2fast", "a-b", "a.b", "x; DROP TABLE y", 'a"b'])
    def test_identifier_rejected(self, name):
        with pytest.raises(ValidationError):
            GetTableDataInput.model_validate({"table": name})

    def test_schema_identifier_rejected(self):
        with pytest.raises(ValidationError) as exc:
            GetTableDataInput.model_validate({"table": "t", "schema": "public; --"})
        assert exc.value.errors()[0]["loc"] == ("schema",)

    @pytest.mark.parametrize("name", ["weather_data\n", "weather_data\nx", " weather_data"])
    def test_identifier_pattern_anchored_both_ends(self, name):
        assert IDENTIFIER_PATTERN.fullmatch(name) is None
