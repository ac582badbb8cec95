"""Campaign engagement workflow: state machines and the operations that drive them."""
