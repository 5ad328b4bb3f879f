"""Network policy data model, matching helpers, table rendering, reading and an in-memory cluster."""