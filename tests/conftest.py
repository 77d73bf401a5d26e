"""
Shared fixtures for the interpreter tests.

- interp: an Interpreter over a freshly bootstrapped kernel
- registry: that interpreter's class registry
- doit: evaluate statements as a workspace DoIt and return the result
- newClass: define a class and install method nodes in it
"""

import pytest

from treetalk.kernel import newInterpreter
from treetalk.nodes import PSequence


@pytest.fixture
def interp():
  return newInterpreter()


@pytest.fixture
def registry(interp):
  return interp.registry


@pytest.fixture
def doit(interp):
  def run(*statements, temps=(), receiver=None):
    return interp.evaluateDoit(PSequence(temps, statements), receiver)
  return run


@pytest.fixture
def newClass(registry):
  def define(name, superclass="Object", ivars=(), methods=(),
      classMethods=(), indexable=None):
    cls = registry.define(name, superclass, list(ivars), indexable)
    for m in methods:
      cls.compile(m)
    for m in classMethods:
      cls.compileClassSide(m)
    return cls
  return define
