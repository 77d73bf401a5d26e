# JSON images.
#
# An image file is a list of class definitions:
#
#   {"name": "Point", "superclass": "Object",
#    "instanceVariables": ["x", "y"], "indexable": false,
#    "methods": {"x": <method node>, ...},
#    "classMethods": {"x:y:": <method node>, ...}}
#
# where each method node is what PMethod.emit() produces. A definition with
# no "superclass" key whose class already exists only adds methods to it, so
# an image can extend kernel classes.

import json
import logging

from .errors import ImageError
from .nodes import PMethod, fromJson

logger = logging.getLogger(__name__)


def loadImage(path, registry):
  with open(path) as f:
    try:
      defs = json.load(f)
    except ValueError as e:
      raise ImageError("{:s}: not valid JSON: {!s}".format(str(path), e))
  return loadClasses(defs, registry)


def loadClasses(defs, registry):
  if not isinstance(defs, list):
    raise ImageError("An image is a list of class definitions")
  classes = []
  for d in defs:
    if not isinstance(d, dict) or not isinstance(d.get("name"), str):
      raise ImageError("Class definition without a name: {!r}".format(d))
    classes.append(loadClass(d, registry))
  return classes


def loadClass(d, registry):
  name = d["name"]
  if registry.includes(name) and "superclass" not in d:
    cls = registry.at(name)
    if d.get("instanceVariables"):
      raise ImageError(
          "Cannot add instance variables to existing class " + name)
    logger.debug("extending %s", name)
  else:
    superName = d.get("superclass")
    if superName is not None and not registry.includes(superName):
      raise ImageError(
          "Unknown superclass '{!s}' for {:s}".format(superName, name))
    cls = registry.define(name, superName, d.get("instanceVariables", []),
        d.get("indexable"))
    logger.debug("defined %s", name)

  for selector, node in methodNodes(d.get("methods", {}), name):
    cls.compile(node, "image")
  for selector, node in methodNodes(d.get("classMethods", {}), name):
    cls.compileClassSide(node, "image")
  return cls


def methodNodes(methods, className):
  if not isinstance(methods, dict):
    raise ImageError("Methods of {:s} must be a dictionary".format(className))
  for selector, md in methods.items():
    node = fromJson(md)
    if not isinstance(node, PMethod):
      raise ImageError("{:s}>>{:s} is not a method node".format(className,
        selector))
    if node.selector != selector:
      raise ImageError("{:s}>>{:s} holds a method for #{!s}".format(
        className, selector, node.selector))
    yield selector, node


# The other direction, for tools that want to save what they built.

def emitMethod(method):
  return PMethod(method.selector, method.argNames, method.body.temps,
      method.body.statements, method.primitive).emit()


def emitClass(cls):
  return {
      "name": cls.name,
      "superclass": cls.superclass.name if cls.superclass else None,
      "instanceVariables": list(cls.instanceVariables),
      "indexable": cls.indexable,
      "methods": {s: emitMethod(m) for s, m in cls.methods.items()},
      "classMethods": {s: emitMethod(m)
        for s, m in cls.metaclass.methods.items()},
      }


def saveImage(classes, path):
  with open(path, 'w') as f:
    json.dump([emitClass(c) for c in classes], f, indent=2)
