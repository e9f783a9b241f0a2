"""Request dispatch support: return-value negotiation and error translation."""
