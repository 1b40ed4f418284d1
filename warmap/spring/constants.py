"""
Spring framework class names, annotation types and defaults.
"""

DISPATCHER_SERVLET = "org.springframework.web.servlet.DispatcherServlet"
CONTEXT_LOADER_LISTENER = "org.springframework.web.context.ContextLoaderListener"

CONTEXT_CONFIG_LOCATION = "contextConfigLocation"
ROOT_CONTEXT_LOCATION = "/WEB-INF/applicationContext.xml"
SERVLET_CONTEXT_TEMPLATE = "/WEB-INF/{servlet_name}-servlet.xml"

# Handler mappings
SIMPLE_URL_HANDLER_MAPPING = "org.springframework.web.servlet.handler.SimpleUrlHandlerMapping"
BEAN_NAME_URL_HANDLER_MAPPING = "org.springframework.web.servlet.handler.BeanNameUrlHandlerMapping"
CONTROLLER_CLASS_NAME_HANDLER_MAPPING = "org.springframework.web.servlet.mvc.support.ControllerClassNameHandlerMapping"

CONTROLLER_INTERFACE = "org.springframework.web.servlet.mvc.Controller"

# Stereotypes
CONTROLLER_ANNOTATION = "org.springframework.stereotype.Controller"
COMPONENT_ANNOTATION = "org.springframework.stereotype.Component"
REST_CONTROLLER_ANNOTATION = "org.springframework.web.bind.annotation.RestController"

# Request mapping
REQUEST_MAPPING = "org.springframework.web.bind.annotation.RequestMapping"
GET_MAPPING = "org.springframework.web.bind.annotation.GetMapping"
POST_MAPPING = "org.springframework.web.bind.annotation.PostMapping"
PUT_MAPPING = "org.springframework.web.bind.annotation.PutMapping"
DELETE_MAPPING = "org.springframework.web.bind.annotation.DeleteMapping"
REQUEST_PARAM = "org.springframework.web.bind.annotation.RequestParam"

# Composed mapping annotations and the request method each implies
COMPOSED_MAPPINGS = {
    GET_MAPPING: "GET",
    POST_MAPPING: "POST",
    PUT_MAPPING: "PUT",
    DELETE_MAPPING: "DELETE",
}

# XML namespaces
BEANS_NAMESPACE = "http://www.springframework.org/schema/beans"
CONTEXT_NAMESPACE = "http://www.springframework.org/schema/context"
P_NAMESPACE = "http://www.springframework.org/schema/p"
