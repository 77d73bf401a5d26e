# The object graph the interpreter runs against, and the class registry it
# consults for method lookup.
#
# Host values stand in for the common kernel objects:
#   nil -> None, true/false -> bool, SmallInteger -> int, Float -> float,
#   String -> str, Symbol -> Symbol, Array -> list.
# Everything else is an STObject with a fixed set of named slots and, when its
# class is indexable, a list of indexed elements.

from .errors import NoClassForValue
from .frames import BlockClosure


class Symbol(str):
  def __repr__(self):
    return "#" + str(self)


class CompiledMethod:
  """A method installed in a class. Immutable once installed."""
  def __init__(self, selector, argNames, body, primitive=None,
      ownerClass=None):
    self.selector = selector
    self.argNames = tuple(argNames)
    self.body = body
    self.primitive = primitive
    self.ownerClass = ownerClass

  @classmethod
  def fromNode(cls, node, ownerClass):
    return cls(node.selector, node.args, node.body, node.primitive, ownerClass)

  @property
  def isPrimitive(self):
    return self.primitive is not None

  @property
  def numArgs(self):
    return len(self.argNames)

  def __repr__(self):
    owner = self.ownerClass.name if self.ownerClass is not None else "nil"
    return "{:s}>>{:s}".format(owner, self.selector)


class STClass:
  def __init__(self, name, superclass=None, instanceVariables=None,
      indexable=False, isMeta=False):
    self.name = name
    self.superclass = superclass
    self.instanceVariables = list(instanceVariables or [])
    self.indexable = indexable
    self.isMeta = isMeta
    self.protocols = {}
    self.methods = {}

    if isMeta:
      self.metaclass = None
    else:
      # The superclass of a metaclass is the superclass's metaclass. The root
      # metaclass has none here; the registry links it to Class.
      metaSuper = superclass.metaclass if superclass is not None else None
      self.metaclass = STClass(name + " class", metaSuper, isMeta=True)

  def addMethod(self, method, protocol="unspecified"):
    if protocol not in self.protocols:
      self.protocols[protocol] = {}
    self.protocols[protocol][method.selector] = method
    self.methods[method.selector] = method
    return method

  def compile(self, node, protocol="unspecified"):
    """Install a PMethod node as an instance-side method."""
    return self.addMethod(CompiledMethod.fromNode(node, self), protocol)

  def compileClassSide(self, node, protocol="unspecified"):
    return self.metaclass.addMethod(
        CompiledMethod.fromNode(node, self.metaclass), protocol)

  def allInstVarNames(self):
    inherited = []
    if self.superclass is not None:
      inherited = self.superclass.allInstVarNames()
    return inherited + self.instanceVariables

  def instSize(self):
    return len(self.allInstVarNames())

  def __repr__(self):
    return self.name


class STObject:
  def __init__(self, cls, size=0):
    self.cls = cls
    self.slots = [None] * cls.instSize()
    self.elements = [None] * size if cls.indexable else None

  def __repr__(self):
    name = self.cls.name
    article = "an" if name[:1] in "AEIOU" else "a"
    return "{:s} {:s}".format(article, name)


class Globals:
  """The global environment. Lives outside any frame."""
  def __init__(self):
    self.map = {}

  def has(self, name):
    return name in self.map

  def get(self, name):
    # KeyError when absent; the interpreter turns that into UnresolvedGlobal.
    return self.map[name]

  def set(self, name, value):
    self.map[name] = value
    return value


class ClassRegistry:
  """Classes by name, plus the lookup and layout questions the interpreter
  asks about them. Newly defined classes are bound as globals too when a
  Globals is supplied."""

  def __init__(self, globals=None):
    self.globals = globals
    self.classes = {}

  def define(self, name, superclassName=None, instanceVariables=None,
      indexable=None):
    superclass = None
    if superclassName is not None:
      superclass = self.at(superclassName)
    if indexable is None:
      indexable = superclass is not None and superclass.indexable
    cls = STClass(name, superclass, instanceVariables, indexable)
    self.classes[name] = cls
    if self.globals is not None:
      self.globals.set(name, cls)
    return cls

  def at(self, name):
    if name not in self.classes:
      raise KeyError("Unknown class '{:s}'".format(name))
    return self.classes[name]

  def includes(self, name):
    return name in self.classes

  def methodFor(self, selector, cls):
    """Only cls's own methods; walking up is the interpreter's job."""
    return cls.methods.get(selector)

  def superclassOf(self, cls):
    if cls.superclass is None and cls.isMeta and "Class" in self.classes:
      # Object class superclass == Class.
      return self.classes["Class"]
    return cls.superclass

  def isClass(self, obj):
    return isinstance(obj, STClass)

  def isIndexable(self, cls):
    return cls.indexable

  def slotIndex(self, cls, name):
    return cls.allInstVarNames().index(name)

  def classOf(self, obj):
    # bool before int, Symbol before str: both are subclasses in Python.
    if obj is None:
      return self.classes["UndefinedObject"]
    elif obj is True:
      return self.classes["True"]
    elif obj is False:
      return self.classes["False"]
    elif isinstance(obj, int):
      return self.classes["SmallInteger"]
    elif isinstance(obj, float):
      return self.classes["Float"]
    elif isinstance(obj, Symbol):
      return self.classes["Symbol"]
    elif isinstance(obj, str):
      return self.classes["String"]
    elif isinstance(obj, list):
      return self.classes["Array"]
    elif isinstance(obj, BlockClosure):
      return self.classes["BlockClosure"]
    elif isinstance(obj, STObject):
      return obj.cls
    elif isinstance(obj, STClass):
      if obj.isMeta:
        return self.classes["Class"]
      return obj.metaclass
    raise NoClassForValue(obj)


def printString(value):
  """Host rendering of a value, in Smalltalk's printString notation."""
  if value is None:
    return "nil"
  elif value is True:
    return "true"
  elif value is False:
    return "false"
  elif isinstance(value, (int, float)):
    return repr(value)
  elif isinstance(value, Symbol):
    return "#" + value
  elif isinstance(value, str):
    return "'" + value.replace("'", "''") + "'"
  elif isinstance(value, list):
    return "#(" + " ".join(printString(v) for v in value) + ")"
  return repr(value)
