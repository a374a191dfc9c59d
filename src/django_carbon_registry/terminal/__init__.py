"""Terminal UI (registryctl) for operators."""
