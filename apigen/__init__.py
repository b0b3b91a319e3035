"""apigen -- scaffolds an ASP.NET Core web-API starter solution.

The heavy lifting lives in :mod:`apigen.materializer`; :mod:`apigen.cli`
wires it to the command line.
"""

__version__ = "1.4.0"
