import importlib
from pathlib import Path

import pytest

from api_doc_reader.errors import DiscoveryError
from api_doc_reader.loader.discover import discover_resources, resource_classes

FIXTURES = Path(__file__).parent / "fixtures"

RESOURCE = '''
from api_doc_reader.annotations.markers import GET, Response, api, api_operation, path


@api(tags="{tag}")
@path("/{tag}")
class {name}:
    @api_operation("List")
    @GET
    def list_all(self) -> Response:
        return Response()
'''


@pytest.fixture
def fixtures_on_path(monkeypatch):
    monkeypatch.syspath_prepend(str(FIXTURES))


def _make_package(root: Path, package: str) -> None:
    pkg = root / package
    (pkg / "nested").mkdir(parents=True)
    (pkg / "__init__.py").write_text("")
    (pkg / "orders.py").write_text(RESOURCE.format(tag="orders", name="OrderResource"))
    (pkg / "nested" / "__init__.py").write_text("")
    (pkg / "nested" / "users.py").write_text(
        RESOURCE.format(tag="users", name="UserResource") + "\nfrom ..orders import OrderResource  # noqa: E402,F401\n"
    )


class TestDiscoverResources:
    def test_module_resources(self, fixtures_on_path):
        resources = discover_resources(["petstore_api"])
        assert [cls.__name__ for cls in resources] == ["PetResource", "AdminResource"]

    def test_package_is_walked(self, tmp_path, monkeypatch):
        _make_package(tmp_path, "shop_api_walked")
        monkeypatch.syspath_prepend(str(tmp_path))
        resources = discover_resources(["shop_api_walked"])
        assert sorted(cls.__name__ for cls in resources) == ["OrderResource", "UserResource"]

    def test_duplicates_are_dropped(self, tmp_path, monkeypatch):
        _make_package(tmp_path, "shop_api_twice")
        monkeypatch.syspath_prepend(str(tmp_path))
        resources = discover_resources(["shop_api_twice.orders", "shop_api_twice"])
        assert [cls.__name__ for cls in resources].count("OrderResource") == 1
        assert resources[0].__name__ == "OrderResource"

    def test_missing_location(self):
        with pytest.raises(DiscoveryError) as excinfo:
            discover_resources(["no_such_resource_module"])
        assert excinfo.value.context["location"] == "no_such_resource_module"

    def test_no_locations(self):
        assert discover_resources([]) == []


class TestResourceClasses:
    def test_imported_classes_are_ignored(self, tmp_path, monkeypatch):
        _make_package(tmp_path, "shop_api_imports")
        monkeypatch.syspath_prepend(str(tmp_path))
        users = importlib.import_module("shop_api_imports.nested.users")
        assert [cls.__name__ for cls in resource_classes(users)] == ["UserResource"]
