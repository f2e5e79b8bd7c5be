import json
import uuid

import pytest
from pydantic import BaseModel

from seeder.exceptions import ConfigurationError
from seeder.seeds.models import SeedConfig
from seeder.sources.loader import export_values, import_schema, load_seed_config, load_source
from tests.conftest import Item


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def schema_module(tmp_path, monkeypatch):
    """An importable module with a pydantic model, under a name unique to this test."""
    name = f"schemas_{uuid.uuid4().hex[:8]}"
    _write(
        tmp_path / f"{name}.py",
        "from pydantic import BaseModel\n\n\nclass Widget(BaseModel):\n    name: str\n",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    return name


class TestLoadSource:
    def test_json(self, tmp_path):
        path = _write(tmp_path / "items.json", json.dumps([{"name": "bolt"}]))
        assert load_source(path) == [{"name": "bolt"}]

    def test_yaml(self, tmp_path):
        path = _write(tmp_path / "items.yaml", "data:\n  - name: bolt\n    quantity: 3\n")
        assert load_source(path) == {"data": [{"name": "bolt", "quantity": 3}]}

    def test_yml(self, tmp_path):
        path = _write(tmp_path / "items.yml", "- name: nut\n")
        assert load_source(path) == [{"name": "nut"}]

    def test_python_module(self, tmp_path):
        path = _write(tmp_path / "items.py", "data = [{'name': 'bolt'}]\nmodel = 'Item'\n")
        module = load_source(path)
        assert module.data == [{"name": "bolt"}]
        assert module.model == "Item"

    def test_python_modules_with_same_stem_do_not_collide(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        first = load_source(_write(tmp_path / "a" / "data.py", "data = [1]\n"))
        second = load_source(_write(tmp_path / "b" / "data.py", "data = [2]\n"))
        assert first.data == [1]
        assert second.data == [2]

    def test_unsupported_extension(self, tmp_path):
        path = _write(tmp_path / "items.csv", "name\nbolt\n")
        with pytest.raises(ConfigurationError, match="Unsupported file extension"):
            load_source(path)

    def test_invalid_json_propagates(self, tmp_path):
        path = _write(tmp_path / "items.json", "[{")
        with pytest.raises(json.JSONDecodeError):
            load_source(path)


class TestExportValues:
    def test_list_is_data(self):
        assert export_values([{"name": "bolt"}]) == ([{"name": "bolt"}], None, None)

    def test_mapping(self):
        loaded = {"data": [{"name": "bolt"}], "schema": "pkg:Item", "model": "Item"}
        assert export_values(loaded) == ([{"name": "bolt"}], "pkg:Item", "Item")

    def test_mapping_without_data_key(self):
        assert export_values({"name": "bolt"}) == (None, None, None)

    def test_module_attributes(self, tmp_path):
        module = load_source(
            _write(tmp_path / "src.py", "schema = 'pkg:Item'\ndata = [{'name': 'bolt'}]\n")
        )
        assert export_values(module) == ([{"name": "bolt"}], "pkg:Item", None)

    def test_module_default_wins(self, tmp_path):
        module = load_source(
            _write(
                tmp_path / "src.py",
                "data = [{'name': 'ignored'}]\n"
                "default = {'data': [{'name': 'bolt'}], 'model': 'Item'}\n",
            )
        )
        assert export_values(module) == ([{"name": "bolt"}], None, "Item")

    def test_module_default_list(self, tmp_path):
        module = load_source(_write(tmp_path / "src.py", "default = [{'name': 'bolt'}]\n"))
        assert export_values(module) == ([{"name": "bolt"}], None, None)

    def test_scalar_exports_nothing(self):
        assert export_values(42) == (None, None, None)


class TestImportSchema:
    def test_class_returned_unchanged(self):
        assert import_schema(Item) is Item

    def test_import_string(self, schema_module):
        schema = import_schema(f"{schema_module}:Widget")
        assert issubclass(schema, BaseModel)
        assert schema.__name__ == "Widget"

    def test_missing_colon(self, schema_module):
        with pytest.raises(ConfigurationError, match="must look like"):
            import_schema(schema_module)

    def test_missing_module(self):
        with pytest.raises(ConfigurationError, match="Cannot import schema"):
            import_schema("no_such_module_anywhere:Widget")

    def test_missing_attribute(self, schema_module):
        with pytest.raises(ConfigurationError, match="Cannot import schema"):
            import_schema(f"{schema_module}:Gadget")

    def test_not_a_model(self):
        with pytest.raises(ConfigurationError, match="not a pydantic model"):
            import_schema("json:dumps")

    def test_wrong_type(self):
        with pytest.raises(ConfigurationError, match="pydantic model or an import string"):
            import_schema(dict)


class TestLoadSeedConfig:
    def test_python_config(self, tmp_path):
        path = _write(
            tmp_path / "seed_config.py",
            "config = {'no_prompt': True, 'collections': {'items': {'path': 'items.json'}}}\n",
        )
        config = load_seed_config(path)
        assert config.no_prompt is True
        assert config.collections["items"].path == "items.json"

    def test_python_config_can_be_a_model(self, tmp_path):
        path = _write(
            tmp_path / "seed_config.py",
            "from seeder.seeds.models import SeedConfig\nconfig = SeedConfig(log_level='debug')\n",
        )
        assert load_seed_config(path).log_level == "debug"

    def test_yaml_camel_case_keys(self, tmp_path):
        path = _write(
            tmp_path / "seeds.yaml",
            "noPrompt: true\n"
            "preferPath: false\n"
            "logLevel: warn\n"
            "mongoUri: mongodb://localhost/shop\n"
            "collections:\n"
            "  items:\n"
            "    schema: pkg:Item\n"
            "    data:\n"
            "      - name: bolt\n",
        )
        config = load_seed_config(path)
        assert isinstance(config, SeedConfig)
        assert config.no_prompt is True
        assert config.prefer_path is False
        assert config.log_level == "warn"
        assert config.mongo_uri == "mongodb://localhost/shop"
        assert config.collections["items"].schema_ == "pkg:Item"

    def test_defaults(self, tmp_path):
        config = load_seed_config(_write(tmp_path / "seeds.json", "{}"))
        assert config.no_prompt is False
        assert config.prefer_path is True
        assert config.log_level == "info"
        assert config.collections == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_seed_config(tmp_path / "nope.py")

    def test_bad_extension(self, tmp_path):
        path = _write(tmp_path / "config.js", "export default {}")
        with pytest.raises(ConfigurationError, match="Invalid configuration file extension"):
            load_seed_config(path)

    def test_module_without_config(self, tmp_path):
        path = _write(tmp_path / "seed_config.py", "settings = {}\n")
        with pytest.raises(ConfigurationError, match="does not define 'config'"):
            load_seed_config(path)

    def test_broken_module(self, tmp_path):
        path = _write(tmp_path / "seed_config.py", "raise RuntimeError('broken')\n")
        with pytest.raises(ConfigurationError, match="Cannot load configuration file"):
            load_seed_config(path)

    def test_unknown_key(self, tmp_path):
        path = _write(tmp_path / "seeds.json", json.dumps({"noPromptt": True}))
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_seed_config(path)
