class WalletError(Exception):
    """Business-rule failure raised by wallet services; rendered as {"error": message}."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
