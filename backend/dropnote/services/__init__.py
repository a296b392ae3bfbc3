# Services package init
"""
Dropnote Backend — Services Layer
===================================

Service Inventory:
    - MessageBackend (abstract): storage seam behind the message handlers.
      Implementations are supplied by the deployment via create_app(backend=...).
"""
