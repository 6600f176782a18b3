"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the rules that span several entities: access
    resolution over the forum tree, tree mutation, cascading deletion.
    """

    pass
