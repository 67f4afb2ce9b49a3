"""HTTP routers (RPC-style) for the catalog API."""
