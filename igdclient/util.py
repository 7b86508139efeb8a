import logging


def _getLogger(name):
    """
    Retrieve a logger instance scoped under the package name. No handler is
    attached, configuring output is left to the application.
    """
    return logging.getLogger("igdclient.%s" % name)


def _localName(tag):
    """
    Strip the '{namespace}' part off an lxml tag.
    """
    if not isinstance(tag, str):
        # Comments and processing instructions
        return None
    return tag.rsplit("}", 1)[-1]


def _elementChildren(node):
    return [child for child in node if isinstance(child.tag, str)]
