"""
Route mapping strategies: explicit URL maps, class-name and bean-name
conventions, and annotation-driven mappings.
"""

import logging
from contextlib import contextmanager

import pytest

from warmap.archive import WarArchive
from warmap.classfile import Annotation, AnnotationDecoder
from warmap.routing import ComponentDestination, HttpMethod, RequestParameter, RouteTable
from warmap.spring import ContextLoader, ResourceResolver, default_strategies
from warmap.spring.strategies import (
    AnnotationMappingStrategy,
    BeanNameConventionStrategy,
    ClassNameConventionStrategy,
    ExplicitUrlMapStrategy,
    mapping_urls,
    url_segment,
)

from tests.classfiles import ACC_BRIDGE, ACC_PUBLIC, ACC_SYNTHETIC, ClassWriter, ann, request_method
from tests.conftest import (
    BEAN_NAME_URL_HANDLER_MAPPING,
    CONTROLLER,
    CONTROLLER_CLASS_NAME_HANDLER_MAPPING,
    CONTROLLER_INTERFACE,
    GET_MAPPING,
    REQUEST_MAPPING,
    REQUEST_PARAM,
    SIMPLE_URL_HANDLER_MAPPING,
    bean,
    beans_xml,
    mappings_property,
    web_xml,
)


@contextmanager
def context_of(builder, *fragments):
    """Load a context from the given fragments; yields (decoder, registry)."""
    builder.add("WEB-INF/ctx.xml", beans_xml(*fragments))
    with WarArchive(builder.web_xml(web_xml()).build()) as war:
        decoder = AnnotationDecoder(war)
        registry = ContextLoader(ResourceResolver(war), decoder).load("/WEB-INF/ctx.xml")
        yield decoder, registry


def mvc_controllers(builder):
    """Classes implementing the MVC Controller interface, directly and through a library base class."""
    return (
        builder
        .add_class(ClassWriter("com.example.web.FooController", interfaces=[CONTROLLER_INTERFACE]))
        .add_class(ClassWriter("com.example.web.Bar", super_name="com.example.base.AbstractController"))
        .add_class(ClassWriter("com.example.base.AbstractController", interfaces=[CONTROLLER_INTERFACE]), jar="base.jar")
        .add_class(ClassWriter("com.example.web.Helper"))
    )


# ============================================================================
# Order
# ============================================================================

class TestDefaultStrategies:

    def test_fixed_order(self):
        strategies = default_strategies(AnnotationDecoder(None))
        assert [type(s) for s in strategies] == [
            ExplicitUrlMapStrategy,
            ClassNameConventionStrategy,
            BeanNameConventionStrategy,
            AnnotationMappingStrategy,
        ]


# ============================================================================
# Explicit URL map
# ============================================================================

class TestExplicitUrlMap:

    def test_mappings(self, war_builder, caplog):
        with context_of(
            war_builder(),
            bean(SIMPLE_URL_HANDLER_MAPPING, body=mappings_property({
                "/foo.html": "beanA",
                "bar.html": "beanB",
                "/ghost.html": "ghost",
            })),
            bean("com.example.A", bean_id="beanA"),
            bean("com.example.B", bean_name="beanB"),
        ) as (decoder, registry):
            table = RouteTable()
            with caplog.at_level(logging.WARNING, logger="warmap"):
                count = ExplicitUrlMapStrategy(decoder).apply(registry, "/servlet", table)

        assert count == 2
        assert list(table) == ["/servlet/bar.html", "/servlet/foo.html"]
        foo = table.get("/servlet/foo.html", HttpMethod.ALL)
        assert foo.describes("beanA")
        assert foo.bean_class == "com.example.A"
        assert table.get("/servlet/bar.html", HttpMethod.POST).describes("beanB")
        assert "ghost" in caplog.text

    def test_url_map_property(self, war_builder):
        with context_of(
            war_builder(),
            bean(
                SIMPLE_URL_HANDLER_MAPPING,
                body='<property name="urlMap"><map><entry key="/a.do" value-ref="beanA"/></map></property>',
            ),
            bean("com.example.A", bean_id="beanA"),
        ) as (decoder, registry):
            table = RouteTable()
            ExplicitUrlMapStrategy(decoder).apply(registry, "", table)
        assert table.get("/a.do", HttpMethod.GET).describes("beanA")

    def test_empty_mappings(self, war_builder, caplog):
        with context_of(war_builder(), bean(SIMPLE_URL_HANDLER_MAPPING, bean_id="mapper")) as (decoder, registry):
            table = RouteTable()
            with caplog.at_level(logging.WARNING, logger="warmap"):
                count = ExplicitUrlMapStrategy(decoder).apply(registry, "/servlet", table)
        assert count == 0
        assert len(table) == 0
        assert "mapper" in caplog.text

    def test_inherited_mappings(self, war_builder):
        with context_of(
            war_builder(),
            bean(SIMPLE_URL_HANDLER_MAPPING, bean_id="base", abstract="true",
                 body=mappings_property({"/inherited.html": "beanA"})),
            bean(bean_id="mapper", parent="base"),
            bean("com.example.A", bean_id="beanA"),
        ) as (decoder, registry):
            table = RouteTable()
            ExplicitUrlMapStrategy(decoder).apply(registry, "", table)
        assert table.get("/inherited.html", HttpMethod.ALL).describes("beanA")


# ============================================================================
# Class-name convention
# ============================================================================

class TestClassNameConvention:

    def test_url_segment(self):
        assert url_segment("com.example.FooController") == "foo"
        assert url_segment("com.example.Foo") == "foo"
        assert url_segment("com.example.Controller") == "controller"

    def test_maps_controllers(self, war_builder):
        with context_of(
            mvc_controllers(war_builder()),
            bean(CONTROLLER_CLASS_NAME_HANDLER_MAPPING),
            bean("com.example.web.FooController", bean_id="foo"),
            bean("com.example.web.Bar", bean_id="bar"),
            bean("com.example.web.Helper", bean_id="helper"),
        ) as (decoder, registry):
            table = RouteTable()
            count = ClassNameConventionStrategy(decoder).apply(registry, "/servlet", table)

        assert count == 2
        assert list(table) == ["/servlet/bar", "/servlet/foo"]
        assert table.get("/servlet/foo", HttpMethod.GET).describes("foo")
        assert table.get("/servlet/bar", HttpMethod.GET).describes("bar")

    def test_path_prefix(self, war_builder):
        with context_of(
            mvc_controllers(war_builder()),
            bean(CONTROLLER_CLASS_NAME_HANDLER_MAPPING, body='<property name="pathPrefix" value="/app/"/>'),
            bean("com.example.web.FooController", bean_id="foo"),
        ) as (decoder, registry):
            table = RouteTable()
            ClassNameConventionStrategy(decoder).apply(registry, "", table)
        assert list(table) == ["/app/foo"]

    def test_inactive_without_mapping_bean(self, war_builder):
        with context_of(
            mvc_controllers(war_builder()),
            bean("com.example.web.FooController", bean_id="foo"),
        ) as (decoder, registry):
            table = RouteTable()
            assert ClassNameConventionStrategy(decoder).apply(registry, "/servlet", table) == 0
        assert len(table) == 0


# ============================================================================
# Bean-name convention
# ============================================================================

class TestBeanNameConvention:

    def test_maps_slash_names(self, war_builder, caplog):
        with context_of(
            mvc_controllers(war_builder()),
            bean(BEAN_NAME_URL_HANDLER_MAPPING),
            bean("com.example.web.FooController", bean_name="/hello.html /hi.html"),
            bean("com.example.web.Bar", bean_id="unnamed"),
            bean("com.example.web.Helper", bean_name="/helper"),
        ) as (decoder, registry):
            table = RouteTable()
            with caplog.at_level(logging.WARNING, logger="warmap"):
                count = BeanNameConventionStrategy(decoder).apply(registry, "/servlet", table)

        assert count == 2
        assert list(table) == ["/servlet/hello.html", "/servlet/hi.html"]
        assert table.get("/servlet/hi.html", HttpMethod.PUT).describes("/hello.html")
        assert "unnamed" in caplog.text

    def test_inactive_without_mapping_bean(self, war_builder):
        with context_of(
            mvc_controllers(war_builder()),
            bean("com.example.web.FooController", bean_name="/hello.html"),
        ) as (decoder, registry):
            table = RouteTable()
            assert BeanNameConventionStrategy(decoder).apply(registry, "", table) == 0


# ============================================================================
# Annotation mapping
# ============================================================================

def controller_b():
    cls = ClassWriter(
        "com.example.web.ControllerB",
        annotations=[ann(CONTROLLER), ann(REQUEST_MAPPING, value=("/B",))],
    )
    cls.method("<init>")
    cls.method(
        "getBar",
        "()Ljava/lang/String;",
        annotations=[ann(REQUEST_MAPPING, value=("/bar.html",), method=(request_method("GET"),))],
    )
    cls.method(
        "getBar",
        "()Ljava/lang/Object;",
        access=ACC_PUBLIC | ACC_BRIDGE | ACC_SYNTHETIC,
        annotations=[ann(REQUEST_MAPPING, value=("/bridge.html",))],
    )
    cls.method(
        "any",
        "()V",
        annotations=[ann(REQUEST_MAPPING, value=("baz.html",))],
    )
    cls.method(
        "many",
        "()V",
        annotations=[ann(REQUEST_MAPPING, value=("/one", "/two"), method=(request_method("POST"), request_method("PUT")))],
    )
    cls.method(
        "composed",
        "()V",
        annotations=[ann(GET_MAPPING, value=("/composed",))],
    )
    cls.method(
        "patch",
        "()V",
        annotations=[ann(REQUEST_MAPPING, value=("/patch",), method=(request_method("PATCH"),))],
    )
    cls.method("helper", "()V")
    return cls


def controller_params():
    cls = ClassWriter("com.example.web.SearchController", annotations=[ann(CONTROLLER)])
    cls.method(
        "search",
        "(Ljava/lang/String;IZLjavax/servlet/http/HttpServletRequest;)Ljava/lang/String;",
        annotations=[ann(REQUEST_MAPPING, value=("/search",))],
        parameter_annotations=[
            [ann(REQUEST_PARAM, value="q")],
            [ann(REQUEST_PARAM, value="page", required=False, defaultValue="1")],
            [ann(REQUEST_PARAM)],
            [],
        ],
        local_variables=[
            ("this", "Lcom/example/web/SearchController;", 0),
            ("query", "Ljava/lang/String;", 1),
            ("pageNumber", "I", 2),
            ("verbose", "Z", 3),
            ("request", "Ljavax/servlet/http/HttpServletRequest;", 4),
        ],
    )
    cls.method(
        "lookup",
        "(I)V",
        annotations=[ann(REQUEST_MAPPING, value=("/lookup",))],
        parameter_annotations=[[ann(REQUEST_PARAM)]],
    )
    return cls


class TestMappingUrls:

    def test_values(self):
        mapping = Annotation(REQUEST_MAPPING, {"value": ("/a", "b")})
        assert mapping_urls("/servlet/", mapping) == ["/servlet/a", "/servlet/b"]

    def test_path_alias(self):
        mapping = Annotation(REQUEST_MAPPING, {"path": ("/p",)})
        assert mapping_urls("", mapping) == ["/p"]

    def test_no_values(self):
        assert mapping_urls("/servlet/", Annotation(REQUEST_MAPPING, {})) == ["/servlet"]
        assert mapping_urls("/servlet", None) == ["/servlet"]


class TestAnnotationMapping:

    def _apply(self, war_builder, *classes, prefix="/servlet"):
        builder = war_builder()
        for cls in classes:
            builder.add_class(cls)
        with context_of(builder, '<context:component-scan base-package="com.example.web"/>') as (decoder, registry):
            table = RouteTable()
            count = AnnotationMappingStrategy(decoder).apply(registry, prefix, table)
        return table, count

    def test_class_and_method_mapping(self, war_builder):
        table, _ = self._apply(war_builder, controller_b())
        assert dict(table.methods("/servlet/B/bar.html")) == {
            HttpMethod.GET: ComponentDestination("controllerB", "com.example.web.ControllerB", "getBar"),
        }

    def test_no_method_attribute_maps_all_four(self, war_builder):
        table, _ = self._apply(war_builder, controller_b())
        methods = table.methods("/servlet/B/baz.html")
        assert set(methods) == set(HttpMethod.specific())
        assert len(set(methods.values())) == 1
        assert table.get("/servlet/B/baz.html", HttpMethod.DELETE).method_name == "any"

    def test_several_values_and_methods(self, war_builder):
        table, _ = self._apply(war_builder, controller_b())
        for url in ("/servlet/B/one", "/servlet/B/two"):
            assert set(table.methods(url)) == {HttpMethod.POST, HttpMethod.PUT}

    def test_composed_mapping(self, war_builder):
        table, _ = self._apply(war_builder, controller_b())
        assert set(table.methods("/servlet/B/composed")) == {HttpMethod.GET}

    def test_skips_bridge_unsupported_and_unmapped(self, war_builder, caplog):
        with caplog.at_level(logging.WARNING, logger="warmap"):
            table, count = self._apply(war_builder, controller_b())
        assert "/servlet/B/bridge.html" not in table
        assert "/servlet/B/patch" not in table
        assert "PATCH" in caplog.text
        assert list(table) == [
            "/servlet/B/bar.html",
            "/servlet/B/baz.html",
            "/servlet/B/composed",
            "/servlet/B/one",
            "/servlet/B/two",
        ]
        assert count == 1 + 4 + 4 + 1

    def test_no_class_mapping_uses_prefix(self, war_builder):
        table, _ = self._apply(war_builder, controller_params(), prefix="")
        assert "/search" in table
        assert "/lookup" in table

    def test_request_params(self, war_builder):
        table, _ = self._apply(war_builder, controller_params())
        params = table.get("/servlet/search", HttpMethod.GET).params
        assert list(params) == ["page", "q", "verbose"]
        assert params["q"] == RequestParameter("q", "java.lang.String", "", True)
        assert params["page"] == RequestParameter("page", "int", "1", False)
        assert params["verbose"] == RequestParameter("verbose", "boolean", "", True)

    def test_unresolvable_param_is_skipped(self, war_builder, caplog):
        with caplog.at_level(logging.WARNING, logger="warmap"):
            table, _ = self._apply(war_builder, controller_params())
        assert dict(table.get("/servlet/lookup", HttpMethod.POST).params) == {}
        assert "lookup" in caplog.text

    def test_unannotated_class_ignored(self, war_builder):
        cls = ClassWriter("com.example.web.NotAController", annotations=[ann("org.springframework.stereotype.Component")])
        cls.method("handle", annotations=[ann(REQUEST_MAPPING, value=("/x",))])
        table, count = self._apply(war_builder, cls)
        assert count == 0
        assert len(table) == 0

    def test_declared_bean_of_annotated_class(self, war_builder):
        builder = war_builder().add_class(controller_b())
        with context_of(builder, bean("com.example.web.ControllerB", bean_id="b")) as (decoder, registry):
            table = RouteTable()
            AnnotationMappingStrategy(decoder).apply(registry, "", table)
        assert table.get("/B/bar.html", HttpMethod.GET).describes("b")

    @pytest.mark.parametrize("prefix, expected", [
        ("", "/B/bar.html"),
        ("/", "/B/bar.html"),
        ("/servlet", "/servlet/B/bar.html"),
    ])
    def test_prefix_normalization(self, war_builder, prefix, expected):
        table, _ = self._apply(war_builder, controller_b(), prefix=prefix)
        assert expected in table
