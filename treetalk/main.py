import argparse
import logging
import sys

from .errors import InterpreterError
from .image import loadImage
from .interpreter import Interpreter
from .kernel import bootstrap

logger = logging.getLogger("treetalk")


def parseTarget(target):
  """'Point>>x' or 'Point class>>origin' -> (class name, class side?, selector)."""
  if ">>" not in target:
    raise ValueError("expected Class>>selector, got '{:s}'".format(target))
  className, selector = target.split(">>", 1)
  className = className.strip()
  classSide = className.endswith(" class")
  if classSide:
    className = className[:-len(" class")].strip()
  if not className or not selector:
    raise ValueError("expected Class>>selector, got '{:s}'".format(target))
  return className, classSide, selector.strip()


def buildParser():
  parser = argparse.ArgumentParser(prog="treetalk",
      description="Run a method from one or more JSON images.")
  parser.add_argument("images", nargs="*", metavar="IMAGE",
      help="JSON image files, loaded in order on top of the kernel")
  parser.add_argument("--run", metavar="CLASS>>SELECTOR",
      help="unary method to run; sent to a new instance, or to the class "
      "itself for 'Class class>>selector'")
  parser.add_argument("--recursion-limit", type=int, default=10000,
      help="host recursion limit (default: %(default)s)")
  parser.add_argument("-v", "--verbose", action="store_true",
      help="log sends and primitive failures")
  return parser


def run(args):
  registry, globals = bootstrap()
  for path in args.images:
    classes = loadImage(path, registry)
    logger.info("%s: %d class(es)", path, len(classes))
  interp = Interpreter(registry, globals)

  if args.run is None:
    print("{:d} classes loaded".format(len(registry.classes)))
    return

  className, classSide, selector = parseTarget(args.run)
  cls = registry.at(className)
  receiver = cls if classSide else interp.send(cls, "new")
  result = interp.send(receiver, selector)
  print(interp.send(result, "printString"))


def main(argv=None):
  args = buildParser().parse_args(argv)
  logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
      format="%(name)s: %(message)s")
  sys.setrecursionlimit(max(args.recursion_limit, sys.getrecursionlimit()))

  try:
    run(args)
  except (InterpreterError, ValueError, KeyError, OSError) as e:
    print("treetalk: {!s}".format(e), file=sys.stderr)
    sys.exit(1)


if __name__ == '__main__':
  main()
