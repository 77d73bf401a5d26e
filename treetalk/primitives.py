# Primitive table.
#
# A primitive is a host function (interp, frame) -> result. The frame is the
# activation of the method that carries the <primitive: n> tag, already
# holding the receiver and the declared arguments, so primitives fetch
# arguments with frame.argumentAt(i).
#
# Anything a primitive can't handle is reported by raising PrimitiveFailure;
# the interpreter then runs the method's own body instead. Checks go in this
# order: argument count, receiver type, argument types, result range.

import operator

from .errors import (ARGUMENT_COUNT, DIVISION_BY_ZERO, INDEX_OUT_OF_BOUNDS,
    INEXACT_RESULT, NOT_IMPLEMENTED, OVERFLOW, TYPE_MISMATCH,
    NonBooleanReceiver, PrimitiveFailure, SmalltalkError)
from .frames import BlockClosure
from .objects import STObject, Symbol, printString

# SmallInteger range of a 64-bit image.
SMALLINT_MIN = -2 ** 60
SMALLINT_MAX = 2 ** 60 - 1

# ___________________________________________________________________________
# Primitive numbers, after the Smalltalk-80 blue book where one exists.

ADD = 1
SUBTRACT = 2
LESSTHAN = 3
GREATERTHAN = 4
LESSOREQUAL = 5
GREATEROREQUAL = 6
EQUAL = 7
NOTEQUAL = 8
MULTIPLY = 9
DIVIDE = 10
MOD = 11
DIV = 12

AS_FLOAT = 40
FLOAT_ADD = 41
FLOAT_SUBTRACT = 42
FLOAT_LESSTHAN = 43
FLOAT_GREATERTHAN = 44
FLOAT_LESSOREQUAL = 45
FLOAT_GREATEROREQUAL = 46
FLOAT_EQUAL = 47
FLOAT_NOTEQUAL = 48
FLOAT_MULTIPLY = 49
FLOAT_DIVIDE = 50

AT = 60
AT_PUT = 61
SIZE = 62
NEW = 70
NEW_WITH_ARG = 71
INST_VAR_AT = 73
INST_VAR_AT_PUT = 74

EQUIVALENT = 110
CLASS = 111
NOT_EQUIVALENT = 169

CLOSURE_VALUE = 201
CLOSURE_VALUE_ = 202
CLOSURE_VALUE_VALUE = 203
CLOSURE_VALUE_VALUE_VALUE = 204
CLOSURE_VALUE_VALUE_VALUE_VALUE = 205
CLOSURE_VALUE_WITH_ARGS = 206
CLOSURE_NUM_ARGS = 207

STRING_CONCAT = 500
PRINT_STRING = 501
ERROR = 502
STRING_EQUAL = 503

# Loops run as host loops so an iteration costs no host stack.
WHILE_TRUE = 510
WHILE_FALSE = 511

# Classes whose instances are host values and can't be made by basicNew.
HOST_CLASSES = ("UndefinedObject", "True", "False", "SmallInteger", "Float",
    "Symbol", "BlockClosure")


class PrimitiveTable:
  """Primitive number -> host function. Each interpreter gets its own."""

  def __init__(self):
    self.table = {}

  def define(self, code, func):
    self.table[code] = func
    return func

  def at(self, code):
    return self.table.get(code)

  def __contains__(self, code):
    return code in self.table

  def __len__(self):
    return len(self.table)

  @classmethod
  def essentials(cls):
    table = cls()
    for code, func in exposed.items():
      table.define(code, func)
    return table


# Filled in at import time by expose().
exposed = {}

def expose(code):
  def decorator(func):
    if code in exposed:
      raise ValueError("Primitive {:d} defined twice".format(code))
    exposed[code] = func
    return func
  return decorator


# ___________________________________________________________________________
# Checks shared by the primitives below. Each one fails the primitive.

def fail(reason=TYPE_MISMATCH):
  raise PrimitiveFailure(reason)

def isSmallInteger(value):
  # bool is an int subclass in Python but never a SmallInteger here.
  return type(value) is int and SMALLINT_MIN <= value <= SMALLINT_MAX

def expectArgs(frame, n):
  if frame.argumentCount() != n:
    fail(ARGUMENT_COUNT)

def smallInteger(value):
  if not isSmallInteger(value):
    fail(TYPE_MISMATCH)
  return value

def representable(value):
  if not SMALLINT_MIN <= value <= SMALLINT_MAX:
    fail(OVERFLOW)
  return value

def number(value):
  if type(value) is float or type(value) is int:
    return float(value)
  fail(TYPE_MISMATCH)

def intArgs(frame):
  expectArgs(frame, 1)
  receiver = smallInteger(frame.receiver)
  argument = smallInteger(frame.argumentAt(1))
  return receiver, argument

def isIdentical(a, b):
  # SmallIntegers, Floats and Symbols are compared by value, the way
  # immediates and interned symbols compare in an image.
  if type(a) is type(b) and type(a) in (int, float, Symbol):
    return a == b
  return a is b


# ___________________________________________________________________________
# SmallInteger Primitives

math_ops = {
    ADD: operator.add,
    SUBTRACT: operator.sub,
    MULTIPLY: operator.mul,
    }
for (code, op) in math_ops.items():
  def make_func(op):
    @expose(code)
    def func(interp, frame):
      receiver, argument = intArgs(frame)
      return representable(op(receiver, argument))
    func.__name__ = "prim_" + op.__name__
  make_func(op)

bool_ops = {
    LESSTHAN: operator.lt,
    GREATERTHAN: operator.gt,
    LESSOREQUAL: operator.le,
    GREATEROREQUAL: operator.ge,
    EQUAL: operator.eq,
    NOTEQUAL: operator.ne,
    }
for (code, op) in bool_ops.items():
  def make_func(op):
    @expose(code)
    def func(interp, frame):
      receiver, argument = intArgs(frame)
      return op(receiver, argument)
    func.__name__ = "prim_" + op.__name__
  make_func(op)

@expose(DIVIDE)
def prim_divide(interp, frame):
  # Only exact quotients; anything else is a Fraction, which falls back.
  receiver, argument = intArgs(frame)
  if argument == 0:
    fail(DIVISION_BY_ZERO)
  if receiver % argument != 0:
    fail(INEXACT_RESULT)
  return representable(receiver // argument)

@expose(DIV)
def prim_div(interp, frame):
  receiver, argument = intArgs(frame)
  if argument == 0:
    fail(DIVISION_BY_ZERO)
  return representable(receiver // argument)

@expose(MOD)
def prim_mod(interp, frame):
  # Python's % floors like \\ does.
  receiver, argument = intArgs(frame)
  if argument == 0:
    fail(DIVISION_BY_ZERO)
  return receiver % argument


# ___________________________________________________________________________
# Float Primitives

@expose(AS_FLOAT)
def prim_asFloat(interp, frame):
  expectArgs(frame, 0)
  return float(smallInteger(frame.receiver))

float_ops = {
    FLOAT_ADD: operator.add,
    FLOAT_SUBTRACT: operator.sub,
    FLOAT_MULTIPLY: operator.mul,
    FLOAT_LESSTHAN: operator.lt,
    FLOAT_GREATERTHAN: operator.gt,
    FLOAT_LESSOREQUAL: operator.le,
    FLOAT_GREATEROREQUAL: operator.ge,
    FLOAT_EQUAL: operator.eq,
    FLOAT_NOTEQUAL: operator.ne,
    }
for (code, op) in float_ops.items():
  def make_func(op):
    @expose(code)
    def func(interp, frame):
      expectArgs(frame, 1)
      if type(frame.receiver) is not float:
        fail(TYPE_MISMATCH)
      return op(frame.receiver, number(frame.argumentAt(1)))
    func.__name__ = "prim_float_" + op.__name__
  make_func(op)

@expose(FLOAT_DIVIDE)
def prim_float_divide(interp, frame):
  expectArgs(frame, 1)
  if type(frame.receiver) is not float:
    fail(TYPE_MISMATCH)
  argument = number(frame.argumentAt(1))
  if argument == 0.0:
    fail(DIVISION_BY_ZERO)
  return frame.receiver / argument


# ___________________________________________________________________________
# Subscript and Stream Primitives

def indexedStorage(receiver, forWrite=False):
  if isinstance(receiver, list):
    return receiver
  if isinstance(receiver, str) and not forWrite:
    # Strings are host strings and therefore read-only.
    return receiver
  if isinstance(receiver, STObject) and receiver.elements is not None:
    return receiver.elements
  fail(TYPE_MISMATCH)

def checkIndex(index, storage):
  smallInteger(index)
  if not 1 <= index <= len(storage):
    fail(INDEX_OUT_OF_BOUNDS)
  return index - 1

@expose(AT)
def prim_at(interp, frame):
  expectArgs(frame, 1)
  storage = indexedStorage(frame.receiver)
  return storage[checkIndex(frame.argumentAt(1), storage)]

@expose(AT_PUT)
def prim_atPut(interp, frame):
  expectArgs(frame, 2)
  storage = indexedStorage(frame.receiver, forWrite=True)
  index = checkIndex(frame.argumentAt(1), storage)
  value = frame.argumentAt(2)
  storage[index] = value
  return value

@expose(SIZE)
def prim_size(interp, frame):
  expectArgs(frame, 0)
  return len(indexedStorage(frame.receiver))


# ___________________________________________________________________________
# Storage Management Primitives

def instantiableClass(interp, receiver):
  if not interp.registry.isClass(receiver) or receiver.isMeta:
    fail(TYPE_MISMATCH)
  if receiver.name in HOST_CLASSES:
    fail(TYPE_MISMATCH)
  return receiver

@expose(NEW)
def prim_basicNew(interp, frame):
  expectArgs(frame, 0)
  cls = instantiableClass(interp, frame.receiver)
  if cls.name == "Array":
    return []
  elif cls.name == "String":
    return ""
  return STObject(cls)

@expose(NEW_WITH_ARG)
def prim_basicNewWithArg(interp, frame):
  expectArgs(frame, 1)
  cls = instantiableClass(interp, frame.receiver)
  if not interp.registry.isIndexable(cls):
    fail(TYPE_MISMATCH)
  size = smallInteger(frame.argumentAt(1))
  if size < 0:
    fail(INDEX_OUT_OF_BOUNDS)
  if cls.name == "Array":
    return [None] * size
  elif cls.name == "String":
    return " " * size
  return STObject(cls, size)

@expose(INST_VAR_AT)
def prim_instVarAt(interp, frame):
  expectArgs(frame, 1)
  if not isinstance(frame.receiver, STObject):
    fail(TYPE_MISMATCH)
  slots = frame.receiver.slots
  return slots[checkIndex(frame.argumentAt(1), slots)]

@expose(INST_VAR_AT_PUT)
def prim_instVarAtPut(interp, frame):
  expectArgs(frame, 2)
  if not isinstance(frame.receiver, STObject):
    fail(TYPE_MISMATCH)
  slots = frame.receiver.slots
  index = checkIndex(frame.argumentAt(1), slots)
  slots[index] = frame.argumentAt(2)
  return slots[index]


# ___________________________________________________________________________
# Control Primitives

@expose(EQUIVALENT)
def prim_equivalent(interp, frame):
  expectArgs(frame, 1)
  return isIdentical(frame.receiver, frame.argumentAt(1))

@expose(NOT_EQUIVALENT)
def prim_notEquivalent(interp, frame):
  expectArgs(frame, 1)
  return not isIdentical(frame.receiver, frame.argumentAt(1))

@expose(CLASS)
def prim_class(interp, frame):
  expectArgs(frame, 0)
  return interp.registry.classOf(frame.receiver)


# ___________________________________________________________________________
# BlockClosure Primitives

def closureReceiver(frame):
  if not isinstance(frame.receiver, BlockClosure):
    fail(TYPE_MISMATCH)
  return frame.receiver

value_ops = {
    CLOSURE_VALUE: 0,
    CLOSURE_VALUE_: 1,
    CLOSURE_VALUE_VALUE: 2,
    CLOSURE_VALUE_VALUE_VALUE: 3,
    CLOSURE_VALUE_VALUE_VALUE_VALUE: 4,
    }
for (code, argc) in value_ops.items():
  def make_func(argc):
    @expose(code)
    def func(interp, frame):
      expectArgs(frame, argc)
      closure = closureReceiver(frame)
      args = [frame.argumentAt(i) for i in range(1, argc + 1)]
      # A wrong count here is the caller's mistake, not a primitive failure:
      # invokeClosure raises ArityMismatch.
      return interp.invokeClosure(closure, args, frame)
    func.__name__ = "prim_closure_value_{:d}".format(argc)
  make_func(argc)

@expose(CLOSURE_VALUE_WITH_ARGS)
def prim_closure_valueWithArguments(interp, frame):
  expectArgs(frame, 1)
  closure = closureReceiver(frame)
  args = frame.argumentAt(1)
  if not isinstance(args, list):
    fail(TYPE_MISMATCH)
  return interp.invokeClosure(closure, list(args), frame)

@expose(CLOSURE_NUM_ARGS)
def prim_closure_numArgs(interp, frame):
  expectArgs(frame, 0)
  return closureReceiver(frame).numArgs


# ___________________________________________________________________________
# String Primitives

@expose(STRING_CONCAT)
def prim_string_concat(interp, frame):
  expectArgs(frame, 1)
  argument = frame.argumentAt(1)
  if not isinstance(frame.receiver, str) or not isinstance(argument, str):
    fail(TYPE_MISMATCH)
  return str(frame.receiver) + str(argument)

@expose(STRING_EQUAL)
def prim_string_equal(interp, frame):
  expectArgs(frame, 1)
  argument = frame.argumentAt(1)
  if not isinstance(frame.receiver, str) or not isinstance(argument, str):
    fail(TYPE_MISMATCH)
  # Strings compare by contents. A Symbol only equals itself.
  if isinstance(frame.receiver, Symbol) or isinstance(argument, Symbol):
    return isIdentical(frame.receiver, argument)
  return frame.receiver == argument

@expose(PRINT_STRING)
def prim_printString(interp, frame):
  expectArgs(frame, 0)
  return printString(frame.receiver)

@expose(ERROR)
def prim_error(interp, frame):
  expectArgs(frame, 1)
  message = frame.argumentAt(1)
  if not isinstance(message, str):
    message = printString(message)
  raise SmalltalkError(message)


# ___________________________________________________________________________
# Loop Primitives

def loop(interp, frame, until):
  expectArgs(frame, 1)
  condition = closureReceiver(frame)
  body = frame.argumentAt(1)
  if not isinstance(body, BlockClosure):
    fail(TYPE_MISMATCH)
  # Nothing has run yet, so failing above is still safe. From here on the
  # blocks have side effects and problems are fatal.
  while True:
    result = interp.invokeClosure(condition, [], frame)
    if result is not True and result is not False:
      raise NonBooleanReceiver(result)
    if result is until:
      return None
    interp.invokeClosure(body, [], frame)

@expose(WHILE_TRUE)
def prim_whileTrue(interp, frame):
  return loop(interp, frame, False)

@expose(WHILE_FALSE)
def prim_whileFalse(interp, frame):
  return loop(interp, frame, True)


def unknownPrimitive(interp, frame):
  """Stands in for a primitive number nobody registered."""
  fail(NOT_IMPLEMENTED)
