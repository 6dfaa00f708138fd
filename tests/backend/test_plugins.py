from fastapi import FastAPI

from backend.plugins import PluginDiscovery, init_plugins


def test_discovers_kintone_plugins():
    plugins = PluginDiscovery().discover_plugins()

    assert {"kintone/counter", "kintone/user"} <= set(plugins)
    assert plugins["kintone/user"].get_metadata()["name"] == "kintone/user"


def test_registers_routes_under_plugin_path():
    app = FastAPI()

    init_plugins(app)

    assert app.url_path_for("get_counter") == "/kintone/counter"
    assert app.url_path_for("record_user_event") == "/kintone/user"


def test_excluded_plugin_is_skipped():
    plugins = PluginDiscovery(excluded_plugins=["kintone/user"]).discover_plugins()

    assert "kintone/user" not in plugins
    assert "kintone/counter" in plugins
