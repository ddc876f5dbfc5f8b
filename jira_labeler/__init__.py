# The MIT License (MIT)
# Copyright © 2025 Entrius

# NOTE: bump this number when we make new updates
__version__ = '1.2.0'
