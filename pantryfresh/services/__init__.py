"""Cart, checkout and order lifecycle services.

Import from the submodules directly; the models import ``order_status`` from
here, so this package stays free of eager imports.
"""
