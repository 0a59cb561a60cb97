"""Request guards: basic auth and body size limit."""
