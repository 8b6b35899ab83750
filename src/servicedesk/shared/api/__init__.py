"""HTTP plumbing shared by the module routers."""
