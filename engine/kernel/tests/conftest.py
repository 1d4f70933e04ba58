"""
Engine kernel test configuration.

Kernel tests are pure or run against fakes; nothing here needs a database
or a network.
"""
