"""NaijaTax: Nigerian personal income and crypto capital gains tax estimator."""
