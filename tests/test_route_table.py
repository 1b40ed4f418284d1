"""
Route table: put/get/remove precedence rules and iteration.
"""

import pytest

from warmap.routing import (
    ComponentDestination,
    FileDestination,
    FileKind,
    HttpMethod,
    RequestParameter,
    RouteTable,
    ServletDestination,
)


D1 = ServletDestination("one", "com.example.One")
D2 = ServletDestination("two", "com.example.Two")
D3 = FileDestination("/index.jsp", FileKind.JSP)


# ============================================================================
# HttpMethod
# ============================================================================

class TestHttpMethod:

    def test_specific_excludes_all(self):
        assert HttpMethod.specific() == (HttpMethod.GET, HttpMethod.POST, HttpMethod.PUT, HttpMethod.DELETE)

    def test_parse(self):
        assert HttpMethod.parse("GET") is HttpMethod.GET
        assert HttpMethod.parse(" delete ") is HttpMethod.DELETE

    def test_parse_unsupported(self):
        assert HttpMethod.parse("PATCH") is None
        assert HttpMethod.parse("ALL") is None

    def test_order(self):
        ordered = sorted(HttpMethod, key=lambda m: m.order)
        assert ordered == [HttpMethod.ALL, HttpMethod.GET, HttpMethod.POST, HttpMethod.PUT, HttpMethod.DELETE]


# ============================================================================
# put / get
# ============================================================================

class TestPutGet:

    def test_all_serves_every_method(self):
        table = RouteTable()
        table.put("/u", D1)
        for method in HttpMethod.specific():
            assert table.get("/u", method) == D1
        assert table.get("/u", HttpMethod.ALL) == D1

    def test_all_overwrites_specific(self):
        table = RouteTable()
        table.put("/u", D1, HttpMethod.GET)
        table.put("/u", D2, HttpMethod.ALL)
        assert table.get("/u", HttpMethod.GET) == D2
        assert dict(table.methods("/u")) == {HttpMethod.ALL: D2}

    def test_specific_does_not_affect_siblings(self):
        table = RouteTable()
        table.put("/u", D2, HttpMethod.ALL)
        table.put("/u", D1, HttpMethod.GET)
        assert table.get("/u", HttpMethod.GET) == D1
        assert table.get("/u", HttpMethod.POST) == D2
        assert table.get("/u", HttpMethod.ALL) == D2

    def test_unknown_url(self):
        table = RouteTable()
        assert table.get("/missing", HttpMethod.GET) is None
        assert dict(table.methods("/missing")) == {}
        assert "/missing" not in table

    def test_put_all_replaces(self):
        table = RouteTable()
        table.put("/u", D1)
        table.put_all("/u", {HttpMethod.GET: D2, HttpMethod.POST: D3})
        assert table.get("/u", HttpMethod.GET) == D2
        assert table.get("/u", HttpMethod.POST) == D3
        assert table.get("/u", HttpMethod.PUT) is None

    def test_put_all_copies_mapping(self):
        table = RouteTable()
        mapping = {HttpMethod.GET: D1}
        table.put_all("/u", mapping)
        mapping[HttpMethod.POST] = D2
        assert table.get("/u", HttpMethod.POST) is None

    def test_methods_is_read_only(self):
        table = RouteTable()
        table.put("/u", D1)
        methods = table.methods("/u")
        with pytest.raises(TypeError):
            methods[HttpMethod.GET] = D2


# ============================================================================
# remove
# ============================================================================

class TestRemove:

    def test_remove_all_on_specific_only_is_noop(self):
        table = RouteTable()
        table.put("/u", D1, HttpMethod.GET)
        table.remove("/u", HttpMethod.ALL)
        assert table.get("/u", HttpMethod.GET) == D1

    def test_remove_all_drops_all_entry(self):
        table = RouteTable()
        table.put("/u", D1)
        table.remove("/u")
        assert "/u" not in table
        assert table.get("/u", HttpMethod.GET) is None

    def test_remove_specific_expands_all(self):
        table = RouteTable()
        table.put("/u", D1)
        table.remove("/u", HttpMethod.DELETE)
        assert table.get("/u", HttpMethod.GET) == D1
        assert table.get("/u", HttpMethod.POST) == D1
        assert table.get("/u", HttpMethod.PUT) == D1
        assert table.get("/u", HttpMethod.DELETE) is None
        assert table.get("/u", HttpMethod.ALL) is None

    def test_remove_specific_keeps_existing_specific(self):
        table = RouteTable()
        table.put("/u", D1)
        table.put("/u", D2, HttpMethod.POST)
        table.remove("/u", HttpMethod.GET)
        assert table.get("/u", HttpMethod.POST) == D2
        assert table.get("/u", HttpMethod.PUT) == D1
        assert table.get("/u", HttpMethod.GET) is None

    def test_remove_unknown_url(self):
        table = RouteTable()
        table.remove("/nothing", HttpMethod.GET)
        table.remove("/nothing", HttpMethod.ALL)
        assert len(table) == 0


# ============================================================================
# Iteration
# ============================================================================

class TestIteration:

    def test_sorted_lexicographically(self):
        table = RouteTable()
        table.put("/b", D1)
        table.put("/a/z", D2)
        table.put("/a", D3)
        assert list(table) == ["/a", "/a/z", "/b"]

    def test_skips_emptied_urls(self):
        table = RouteTable()
        table.put("/a", D1)
        table.put("/b", D2)
        table.remove("/a")
        assert list(table) == ["/b"]
        assert len(table) == 1


# ============================================================================
# Destinations
# ============================================================================

class TestComponentDestination:

    def test_params_are_read_only(self):
        dest = ComponentDestination("bean", "com.example.Foo", "list", {"q": RequestParameter("q", "java.lang.String")})
        with pytest.raises(TypeError):
            dest.params["x"] = RequestParameter("x", "int")

    def test_equality_ignores_param_hash(self):
        params = {"q": RequestParameter("q", "int")}
        a = ComponentDestination("bean", "com.example.Foo", "list", params)
        b = ComponentDestination("bean", "com.example.Foo", "list", params)
        assert a == b
        assert hash(a) == hash(b)

    def test_describes_key(self):
        dest = ComponentDestination("beanA", "com.example.A")
        assert dest.describes("beanA")
        assert not dest.describes("beanB")

    def test_file_kind(self):
        assert FileKind.for_path("/a/INDEX.JSP") is FileKind.JSP
        assert FileKind.for_path("/page.htm") is FileKind.HTML
        assert FileKind.for_path("/page.html") is FileKind.HTML
        assert FileKind.for_path("/js/app.js") is FileKind.STATIC
