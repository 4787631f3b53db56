"""Core capability-routing package.

Architectural role:
    Exposes the agent layer that sits between caller route handlers and the LLM
    dispatch layer.

Composition:
    - `capabilities`: closed capability set and per-capability policy.
    - `extraction`: best-effort JSON extraction with `Structured`/`Raw` results.
    - `engine`: `run_agent` request/response pipeline.

Determinism and side effects:
    Package import itself is deterministic and side-effect free. Network side
    effects happen only inside `engine.run_agent` via `ngo_agent.llm.service`.
"""
