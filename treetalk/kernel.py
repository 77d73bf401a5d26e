# The kernel classes every image starts from.
#
# Method bodies are built straight from nodes, the way a front-end would hand
# them over. Primitive-tagged methods carry their fallback code as the body;
# when none is given the fallback is ^self primitiveFailed, which ends in
# Object>>error:.

from . import primitives as P
from .interpreter import Interpreter
from .nodes import (PMethod, PSelf, answer, arg, assignTemp, block, lit, send,
    temp)
from .objects import ClassRegistry, Globals

SELF = PSelf()

# (name, superclass, instance variables, indexable)
KERNEL_CLASSES = [
    ("Object", None, [], False),
    ("Class", "Object", [], False),
    ("UndefinedObject", "Object", [], False),
    ("Boolean", "Object", [], False),
    ("True", "Boolean", [], False),
    ("False", "Boolean", [], False),
    ("Magnitude", "Object", [], False),
    ("Number", "Magnitude", [], False),
    ("SmallInteger", "Number", [], False),
    ("Float", "Number", [], False),
    ("Collection", "Object", [], False),
    ("Array", "Collection", [], True),
    ("String", "Collection", [], True),
    ("Symbol", "String", [], True),
    ("BlockClosure", "Object", [], False),
    ]


def method(selector, args=(), temps=(), *code):
  return PMethod(selector, args, temps, code)

def primitive(selector, number, args=(), *fallback):
  if not fallback:
    fallback = (answer(send(SELF, "primitiveFailed")),)
  return PMethod(selector, args, (), fallback, number)


def objectMethods():
  anObject = arg("anObject")
  return [
      primitive("==", P.EQUIVALENT, ["anObject"]),
      primitive("~~", P.NOT_EQUIVALENT, ["anObject"],
        answer(send(send(SELF, "==", anObject), "not"))),
      method("=", ["anObject"], (), answer(send(SELF, "==", anObject))),
      method("~=", ["anObject"], (),
        answer(send(send(SELF, "=", anObject), "not"))),
      primitive("class", P.CLASS),
      # No statements: answers self.
      method("yourself"),
      method("isNil", (), (), answer(lit(False))),
      method("notNil", (), (), answer(lit(True))),
      method("isNumber", (), (), answer(lit(False))),
      method("ifNil:", ["aBlock"]),
      method("ifNotNil:", ["aBlock"], (),
        answer(send(arg("aBlock"), "value:", SELF))),
      primitive("at:", P.AT, ["index"]),
      primitive("at:put:", P.AT_PUT, ["index", "value"]),
      primitive("size", P.SIZE, (), answer(lit(0))),
      primitive("instVarAt:", P.INST_VAR_AT, ["index"]),
      primitive("instVarAt:put:", P.INST_VAR_AT_PUT, ["index", "value"]),
      primitive("printString", P.PRINT_STRING),
      primitive("error:", P.ERROR, ["aString"]),
      method("primitiveFailed", (), (),
        answer(send(SELF, "error:", lit("a primitive has failed")))),
      ]

def classMethods():
  # Installed on Class, so every class answers them.
  return [
      primitive("basicNew", P.NEW),
      primitive("basicNew:", P.NEW_WITH_ARG, ["size"]),
      method("new", (), (), answer(send(SELF, "basicNew"))),
      method("new:", ["size"], (), answer(send(SELF, "basicNew:", arg("size")))),
      ]

def undefinedObjectMethods():
  return [
      method("isNil", (), (), answer(lit(True))),
      method("notNil", (), (), answer(lit(False))),
      method("ifNil:", ["aBlock"], (), answer(send(arg("aBlock"), "value"))),
      method("ifNotNil:", ["aBlock"]),
      ]

def booleanMethods(isTrue):
  # True and False only differ in which block they run.
  def taken(name):
    return answer(send(arg(name), "value"))
  skipped = answer(lit(None))
  if isTrue:
    return [
        method("ifTrue:", ["aBlock"], (), taken("aBlock")),
        method("ifFalse:", ["aBlock"], (), skipped),
        method("ifTrue:ifFalse:", ["trueBlock", "falseBlock"], (),
          taken("trueBlock")),
        method("ifFalse:ifTrue:", ["falseBlock", "trueBlock"], (),
          taken("trueBlock")),
        method("and:", ["aBlock"], (), taken("aBlock")),
        method("or:", ["aBlock"], (), answer(lit(True))),
        method("&", ["aBoolean"], (), answer(arg("aBoolean"))),
        method("|", ["aBoolean"], (), answer(lit(True))),
        method("not", (), (), answer(lit(False))),
        ]
  return [
      method("ifTrue:", ["aBlock"], (), skipped),
      method("ifFalse:", ["aBlock"], (), taken("aBlock")),
      method("ifTrue:ifFalse:", ["trueBlock", "falseBlock"], (),
        taken("falseBlock")),
      method("ifFalse:ifTrue:", ["falseBlock", "trueBlock"], (),
        taken("falseBlock")),
      method("and:", ["aBlock"], (), answer(lit(False))),
      method("or:", ["aBlock"], (), taken("aBlock")),
      method("&", ["aBoolean"], (), answer(lit(False))),
      method("|", ["aBoolean"], (), answer(arg("aBoolean"))),
      method("not", (), (), answer(lit(True))),
      ]

def numberMethods():
  i = temp("i")
  aNumber = arg("aNumber")
  return [
      method("isNumber", (), (), answer(lit(True))),
      method("negated", (), (), answer(send(lit(0), "-", SELF))),
      method("max:", ["aNumber"], (),
        answer(send(send(SELF, ">", aNumber), "ifTrue:ifFalse:",
          block([], [], SELF), block([], [], aNumber)))),
      method("min:", ["aNumber"], (),
        answer(send(send(SELF, "<", aNumber), "ifTrue:ifFalse:",
          block([], [], SELF), block([], [], aNumber)))),
      # to: stop do: aBlock
      #   | i |
      #   i := self.
      #   [i <= stop] whileTrue: [aBlock value: i. i := i + 1]
      method("to:do:", ["stop", "aBlock"], ["i"],
        assignTemp("i", SELF),
        send(block([], [], send(i, "<=", arg("stop"))), "whileTrue:",
          block([], [],
            send(arg("aBlock"), "value:", i),
            assignTemp("i", send(i, "+", lit(1)))))),
      ]

def smallIntegerMethods():
  aNumber = arg("aNumber")
  def viaFloat(selector):
    # Mixed arithmetic and overflow: retry in Float.
    return answer(send(send(SELF, "asFloat"), selector, aNumber))
  out = []
  for selector, number in (("+", P.ADD), ("-", P.SUBTRACT),
      ("*", P.MULTIPLY), ("/", P.DIVIDE), ("<", P.LESSTHAN),
      (">", P.GREATERTHAN), ("<=", P.LESSOREQUAL),
      (">=", P.GREATEROREQUAL)):
    out.append(primitive(selector, number, ["aNumber"], viaFloat(selector)))
  out += [
      primitive("=", P.EQUAL, ["aNumber"],
        answer(send(send(aNumber, "isNumber"), "and:",
          block([], [], send(send(SELF, "asFloat"), "=", aNumber))))),
      primitive("~=", P.NOTEQUAL, ["aNumber"],
        answer(send(send(SELF, "=", aNumber), "not"))),
      primitive("//", P.DIV, ["aNumber"]),
      primitive("\\\\", P.MOD, ["aNumber"]),
      primitive("asFloat", P.AS_FLOAT),
      ]
  return out

def floatMethods():
  aNumber = arg("aNumber")
  out = []
  for selector, number in (("+", P.FLOAT_ADD), ("-", P.FLOAT_SUBTRACT),
      ("*", P.FLOAT_MULTIPLY), ("/", P.FLOAT_DIVIDE),
      ("<", P.FLOAT_LESSTHAN), (">", P.FLOAT_GREATERTHAN),
      ("<=", P.FLOAT_LESSOREQUAL), (">=", P.FLOAT_GREATEROREQUAL)):
    out.append(primitive(selector, number, ["aNumber"]))
  out += [
      primitive("=", P.FLOAT_EQUAL, ["aNumber"], answer(lit(False))),
      primitive("~=", P.FLOAT_NOTEQUAL, ["aNumber"],
        answer(send(send(SELF, "=", aNumber), "not"))),
      method("asFloat"),
      ]
  return out

def collectionMethods():
  # do: aBlock
  #   1 to: self size do: [:i | aBlock value: (self at: i)]
  return [
      method("do:", ["aBlock"], (),
        send(lit(1), "to:do:", send(SELF, "size"),
          block(["i"], [],
            send(arg("aBlock"), "value:", send(SELF, "at:", arg("i")))))),
      method("isEmpty", (), (), answer(send(send(SELF, "size"), "=", lit(0)))),
      ]

def stringMethods():
  return [
      primitive(",", P.STRING_CONCAT, ["aString"]),
      primitive("=", P.STRING_EQUAL, ["aString"], answer(lit(False))),
      ]

def blockClosureMethods():
  names = ["arg1", "arg2", "arg3", "arg4"]
  out = [primitive("value", P.CLOSURE_VALUE)]
  for n, number in ((1, P.CLOSURE_VALUE_), (2, P.CLOSURE_VALUE_VALUE),
      (3, P.CLOSURE_VALUE_VALUE_VALUE),
      (4, P.CLOSURE_VALUE_VALUE_VALUE_VALUE)):
    out.append(primitive("value:" * n, number, names[:n]))
  out += [
      primitive("valueWithArguments:", P.CLOSURE_VALUE_WITH_ARGS,
        ["anArray"]),
      primitive("numArgs", P.CLOSURE_NUM_ARGS),
      primitive("whileTrue:", P.WHILE_TRUE, ["aBlock"]),
      primitive("whileFalse:", P.WHILE_FALSE, ["aBlock"]),
      ]
  return out


KERNEL_METHODS = {
    "Object": objectMethods,
    "Class": classMethods,
    "UndefinedObject": undefinedObjectMethods,
    "True": lambda: booleanMethods(True),
    "False": lambda: booleanMethods(False),
    "Number": numberMethods,
    "SmallInteger": smallIntegerMethods,
    "Float": floatMethods,
    "Collection": collectionMethods,
    "String": stringMethods,
    "BlockClosure": blockClosureMethods,
    }


def bootstrap():
  """Build a fresh registry and global environment holding the kernel."""
  globals = Globals()
  registry = ClassRegistry(globals)
  for name, superclass, ivars, indexable in KERNEL_CLASSES:
    registry.define(name, superclass, ivars, indexable)

  for name, methods in KERNEL_METHODS.items():
    cls = registry.at(name)
    for node in methods():
      cls.compile(node, "kernel")

  # The pseudo-variables, for front-ends that compile them as global reads.
  globals.set("nil", None)
  globals.set("true", True)
  globals.set("false", False)
  return registry, globals


def newInterpreter(primitives=None):
  registry, globals = bootstrap()
  return Interpreter(registry, globals, primitives)
