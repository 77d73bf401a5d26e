# The AST handed to the interpreter.
#
# A front-end (a parser plus scope analysis) is expected to build these, with
# every variable reference already classified by kind. The interpreter never
# guesses a kind from the shape of a name.
#
# Nodes are never mutated once built. Each one can emit() itself as a plain
# dict for JSON images, and fromJson() turns such a dict back into a node.

from .errors import ImageError

KIND_GLOBAL = 'global'
KIND_TEMP = 'temp'
KIND_ARG = 'arg'
KIND_INST_VAR = 'instvar'

KINDS = (KIND_GLOBAL, KIND_TEMP, KIND_ARG, KIND_INST_VAR)


class PBase:
  nodeName = None

  def emit(self):
    # Default case that just emits the node tag as an empty object.
    return {"node": self.nodeName}

  def isSuper(self):
    return False

  def __str__(self):
    return self.__class__.__name__ + ": " + str(self.__dict__)

  __repr__ = __str__


# Operands: self, super, variable references, literals and blocks.

class POperand(PBase):
  pass


class PSelf(POperand):
  nodeName = "self"


class PSuper(POperand):
  """Evaluates to the receiver, same as self. Only a send whose receiver is
  super behaves differently."""
  nodeName = "super"

  def isSuper(self):
    return True


class PReference(POperand):
  """A variable read. Instance variables carry their slot index; temps and
  args are found by name up the lexical chain; globals by name."""
  nodeName = "reference"

  def __init__(self, name, kind, index=None):
    if kind not in KINDS:
      raise ValueError("Unknown reference type: " + str(kind))
    self.name = name
    self.kind = kind
    self.index = index

  def emit(self):
    return {**super().emit(), "name": self.name, "kind": self.kind,
        "index": self.index}


class PLiteral(POperand):
  """Strings, numbers, nil, true and false."""
  nodeName = "literal"

  def __init__(self, value):
    self.value = value

  def emit(self):
    return {**super().emit(), "value": self.value}


class PSymbol(PLiteral):
  nodeName = "symbol"


class PLiteralArray(POperand):
  """#(...) literal. Elements are themselves literal nodes, possibly nested
  literal arrays."""
  nodeName = "literalArray"

  def __init__(self, elements=None):
    self.elements = list(elements or [])

  def emit(self):
    return {**super().emit(), "elements": [e.emit() for e in self.elements]}


class PSequence(PBase):
  nodeName = "sequence"

  def __init__(self, temps=None, statements=None):
    self.temps = list(temps or [])
    self.statements = list(statements or [])

  def emit(self):
    return {**super().emit(), "temps": self.temps,
        "statements": [s.emit() for s in self.statements]}


class PBlock(POperand):
  # Takes an array of param names (no colons), an array of temp names and the
  # statements of the body.
  nodeName = "block"

  def __init__(self, params=None, temps=None, code=None):
    self.params = list(params or [])
    self.body = PSequence(temps, code)

  @property
  def temps(self):
    return self.body.temps

  def emit(self):
    return {**super().emit(), "params": self.params, "temps": self.body.temps,
        "statements": [s.emit() for s in self.body.statements]}


class PSend(PBase):
  nodeName = "send"

  def __init__(self, receiver, selector, args=None):
    self.receiver = receiver
    self.selector = selector
    self.args = list(args or [])

  @property
  def isSuperSend(self):
    return self.receiver.isSuper()

  def emit(self):
    return {**super().emit(), "receiver": self.receiver.emit(),
        "selector": self.selector, "args": [a.emit() for a in self.args]}


class PAssignment(PBase):
  nodeName = "assign"

  def __init__(self, name, kind, index, value):
    if kind not in KINDS:
      raise ValueError("Unknown assignment target type: " + str(kind))
    self.name = name
    self.kind = kind
    self.index = index
    self.value = value

  def emit(self):
    return {**super().emit(), "name": self.name, "kind": self.kind,
        "index": self.index, "value": self.value.emit()}


class PAnswer(PBase):
  """^expr. Returns from the home method, whether or not it appears inside a
  block."""
  nodeName = "answer"

  def __init__(self, expr):
    self.expr = expr

  def emit(self):
    return {**super().emit(), "value": self.expr.emit()}


class PMethod(PBase):
  """A whole method: selector, argument names and body, plus the primitive
  number from a <primitive: n> pragma if there was one."""
  nodeName = "method"

  def __init__(self, selector, args=None, temps=None, code=None,
      primitive=None):
    self.selector = selector
    self.args = list(args or [])
    self.body = PSequence(temps, code)
    self.primitive = primitive

  def emit(self):
    out = {**super().emit(), "selector": self.selector, "args": self.args,
        "temps": self.body.temps,
        "statements": [s.emit() for s in self.body.statements]}
    if self.primitive is not None:
      out["primitive"] = self.primitive
    return out


def fromJson(d):
  """Rebuild a node from the dict emit() produced."""
  if not isinstance(d, dict) or "node" not in d:
    raise ImageError("Not a node: {!r}".format(d))
  tag = d["node"]
  try:
    if tag == "self":
      return PSelf()
    elif tag == "super":
      return PSuper()
    elif tag == "reference":
      return PReference(d["name"], d["kind"], d.get("index"))
    elif tag == "literal":
      return literalFromJson(d["value"])
    elif tag == "symbol":
      if not isinstance(d["value"], str):
        raise ImageError("Symbol literal must be a string: {!r}".format(
          d["value"]))
      return PSymbol(d["value"])
    elif tag == "literalArray":
      return PLiteralArray([fromJson(e) for e in d["elements"]])
    elif tag == "sequence":
      return PSequence(d.get("temps"),
          [fromJson(s) for s in d["statements"]])
    elif tag == "block":
      return PBlock(d.get("params"), d.get("temps"),
          [fromJson(s) for s in d["statements"]])
    elif tag == "send":
      return PSend(fromJson(d["receiver"]), d["selector"],
          [fromJson(a) for a in d.get("args", [])])
    elif tag == "assign":
      return PAssignment(d["name"], d["kind"], d.get("index"),
          fromJson(d["value"]))
    elif tag == "answer":
      return PAnswer(fromJson(d["value"]))
    elif tag == "method":
      return PMethod(d["selector"], d.get("args"), d.get("temps"),
          [fromJson(s) for s in d["statements"]], d.get("primitive"))
  except KeyError as e:
    raise ImageError("Node '{!s}' is missing field {!s}".format(tag, e))
  except (TypeError, ValueError) as e:
    raise ImageError("Bad '{!s}' node: {!s}".format(tag, e))
  raise ImageError("Unknown node type '{!s}'".format(tag))


SCALAR_TYPES = (type(None), bool, int, float, str)

def literalFromJson(value):
  # A JSON list becomes a literal array, so every evaluation answers a fresh
  # list. Anything other than a scalar has no literal form.
  if isinstance(value, list):
    return PLiteralArray([literalFromJson(v) for v in value])
  if not isinstance(value, SCALAR_TYPES):
    raise ImageError("No literal form for {!r}".format(value))
  return PLiteral(value)


# Shorthand constructors, for hand-built method bodies (the kernel, tests).

def lit(value):
  return PLiteral(value)

def sym(name):
  return PSymbol(name)

def temp(name):
  return PReference(name, KIND_TEMP)

def arg(name):
  return PReference(name, KIND_ARG)

def inst(name, index):
  return PReference(name, KIND_INST_VAR, index)

def glob(name):
  return PReference(name, KIND_GLOBAL)

def send(receiver, selector, *args):
  return PSend(receiver, selector, args)

def answer(expr):
  return PAnswer(expr)

def block(params=None, temps=None, *code):
  return PBlock(params, temps, code)

def assignTemp(name, value):
  return PAssignment(name, KIND_TEMP, None, value)

def assignInst(name, index, value):
  return PAssignment(name, KIND_INST_VAR, index, value)

def assignGlobal(name, value):
  return PAssignment(name, KIND_GLOBAL, None, value)
