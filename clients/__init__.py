"""HTTP clients for the Meraki Dashboard and PRTG APIs."""
