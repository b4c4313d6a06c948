"""HTTP API for running and inspecting migration steps."""
